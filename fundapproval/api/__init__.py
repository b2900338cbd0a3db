"""Stub backend routers"""
