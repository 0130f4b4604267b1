"""Authentication and authorization.

One authentication path: email/password → signed, expiring bearer token.
Every protected request presents the token; the request authorizer
decodes it, resolves the user, and hands the handler a CurrentIdentity.
Handlers scope all task queries by that identity's user_id.
"""
