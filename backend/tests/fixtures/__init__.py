"""Shared test builders and doubles"""
