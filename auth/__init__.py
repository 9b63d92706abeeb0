from auth.session import ApiSession, User, get_session, get_user, is_logged_in, login, logout

__all__ = ["ApiSession", "User", "get_session", "get_user", "is_logged_in", "login", "logout"]
