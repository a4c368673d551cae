"""Store module for the shopping cart.

Holds each shopper's in-progress selections, persisted per user and kept
in the session for anonymous visitors until they sign in.
"""
