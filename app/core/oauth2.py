from fastapi.security import OAuth2PasswordBearer

# Bearer token from the Authorization header. auto_error is off so a missing
# token reaches get_current_user and fails as NotAuthenticated.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)
