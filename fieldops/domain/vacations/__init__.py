"""Vacations domain - Vacations, time off and time bank"""
