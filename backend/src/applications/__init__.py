"""Application lifecycle services and HTTP routers"""
