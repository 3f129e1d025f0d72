"""Bonus domain - Monthly per-agent bonus report and bonus schedule"""
