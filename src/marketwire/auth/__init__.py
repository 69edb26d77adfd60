"""Caller identity.

Learn: Login, JWT issuance and session handling live in the marketplace
API gateway. By the time a request reaches this service the gateway has
verified the caller and forwarded the user id in X-User-ID.
"""
