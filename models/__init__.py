from .db import db
from .personnel import Personnel, Role, personnel_roles
from .login_attempt import LoginAttempt
