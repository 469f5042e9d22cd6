"""Human-readable error and success texts returned to clients."""


class ErrorMessages:
    # Common
    SERVER = "Internal server error"
    UNAUTHORIZED = "Sign-in required"
    INVALID_REQUEST = "Invalid request"

    # Auth
    INVALID_CREDENTIALS = "Invalid email or password"
    MISSING_FIELDS = "Please fill in all fields"
    EMAIL_ALREADY_EXISTS = "This email is already in use"
    USERNAME_ALREADY_EXISTS = "This username is already in use"
    UNKNOWN_PROVIDER = "Unknown sign-in provider"

    # Profile
    USER_NOT_FOUND = "User not found"
    PROFILE_LOAD_FAILED = "Failed to load profile"
    PROFILE_UPDATE_FAILED = "Failed to update profile"
    NOTHING_TO_UPDATE = "Nothing to update"

    # File upload
    FILE_TOO_LARGE = "Images must be 5MB or smaller"
    FILE_INVALID_TYPE = "Only image files can be uploaded"
    TOO_MANY_IMAGES = "A post can have at most 4 images"
    UPLOAD_FAILED = "Image upload failed"

    # Posts
    CONTENT_REQUIRED = "Please enter some content"
    POST_CREATE_FAILED = "Failed to create post"

    # Database
    DB_CONNECTION_FAILED = "Database connection failed"


class SuccessMessages:
    SIGNUP_SUCCESS = "Sign-up successful"
    SIGNOUT_SUCCESS = "Signed out"
    PROFILE_UPDATE_SUCCESS = "Profile updated"
    POST_CREATE_SUCCESS = "Post created"
    DB_CONNECTION_OK = "Database connection OK"
