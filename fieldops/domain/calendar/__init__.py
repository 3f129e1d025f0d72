"""Calendar domain - Holidays and business-day rules"""
