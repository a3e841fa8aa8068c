from labshare.models.student import Student
from labshare.models.auth_code import AuthCode
from labshare.models.auth_session import AuthSession
