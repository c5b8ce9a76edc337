"""Application-wide constants.

Field lengths and limits shared by models, schemas and services.
"""

# String field lengths
MAX_USERNAME_LENGTH = 50
MIN_USERNAME_LENGTH = 3
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 100
MAX_IPV6_LENGTH = 45
MAX_ROLE_NAME_LENGTH = 100
MAX_PERMISSION_RESOURCE_LENGTH = 100
MAX_PERMISSION_ACTION_LENGTH = 50
MAX_PERMISSION_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 255
MAX_AUDIT_ACTION_LENGTH = 50
MAX_REQUEST_ID_LENGTH = 64

# Password requirements
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128
BCRYPT_ROUNDS = 12

# Pagination defaults
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Token settings
ACCESS_TOKEN_JTI_LENGTH = 32

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
