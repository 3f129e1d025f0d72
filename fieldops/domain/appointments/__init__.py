"""Appointments domain - Field visits scheduled on the calendar"""
