"""Fleet domain - Company vehicles"""
