"""Users repository - Profiles and roles"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Agent, Profile, UserRole


class UserRepository:
    @staticmethod
    def get_profiles(db: Session) -> list[Profile]:
        return (
            db.query(Profile)
            .options(joinedload(Profile.role))
            .order_by(Profile.full_name, Profile.username)
            .all()
        )

    @staticmethod
    def get_profile(db: Session, user_id: str) -> Optional[Profile]:
        return (
            db.query(Profile).options(joinedload(Profile.role)).filter(Profile.id == user_id).first()
        )

    @staticmethod
    def username_taken(db: Session, username: str, exclude_id: Optional[str] = None) -> bool:
        query = db.query(Profile.id).filter(Profile.username == username)
        if exclude_id:
            query = query.filter(Profile.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def email_taken(db: Session, email: str, exclude_id: Optional[str] = None) -> bool:
        query = db.query(Profile.id).filter(Profile.email == email)
        if exclude_id:
            query = query.filter(Profile.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def get_email_from_username(db: Session, username: str) -> Optional[str]:
        row = db.query(Profile.email).filter(Profile.username == username).first()
        return row.email if row else None

    @staticmethod
    def create_profile(db: Session, user_id: str, role: str, **data) -> Profile:
        profile = Profile(id=user_id, **data)
        profile.role = UserRole(role=role)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def update_profile(db: Session, profile: Profile, role: Optional[str] = None, **updates) -> Profile:
        for key, value in updates.items():
            if value is not None and hasattr(profile, key):
                setattr(profile, key, value)
        if role is not None:
            if profile.role:
                profile.role.role = role
            else:
                profile.role = UserRole(role=role)
        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def delete_profile(db: Session, profile: Profile) -> None:
        """Delete a profile and its role; a linked agent is kept but unlinked"""
        db.query(Agent).filter(Agent.user_id == profile.id).update(
            {Agent.user_id: None}, synchronize_session=False
        )
        db.delete(profile)
        db.commit()
