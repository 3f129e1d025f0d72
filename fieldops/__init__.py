"""FieldOps API - Scheduling, vacations and bonus backend for field-service teams"""
