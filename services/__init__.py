"""
Business logic behind the routers.

Nothing is re-exported here; import from the submodules so that loading
one service never pulls in the others:

    from services.users import UserService, get_user_service
    from services.auth import AuthService, get_auth_service
"""
__all__: list[str] = []
