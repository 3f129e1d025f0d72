"""Team domain - Field agents"""
