"""
familyvault/utils/constants.py

Purpose: Centralized static content

- All user-facing alert and prompt texts
- Category labels, icons and placeholder texts
- Reusable enums and constants

(Prevents hardcoding across the codebase)
"""

# ============================================================
# DOCUMENT CATEGORIES
# ============================================================

DOCUMENT_CATEGORIES = (
    "aadhaar",
    "pan",
    "passport",
    "license",
    "marksheet",
    "certificate",
    "other",
)

CATEGORY_LABELS = {
    "aadhaar": "Aadhaar Card",
    "pan": "PAN Card",
    "passport": "Passport",
    "license": "Driving License",
    "marksheet": "Marksheet",
    "certificate": "Certificate",
    "other": "Other",
}

CATEGORY_ICONS = {
    "aadhaar": "fa-id-card",
    "pan": "fa-credit-card",
    "passport": "fa-passport",
    "license": "fa-car",
    "marksheet": "fa-graduation-cap",
    "certificate": "fa-certificate",
    "other": "fa-file-alt",
}

ACCEPTED_FILE_EXTENSIONS = ".pdf,.jpg,.jpeg,.png"

FAMILY_ROLES = ("admin", "member", "viewer")
SHARE_PERMISSIONS = ("read", "write", "admin")

# ============================================================
# AUTHENTICATION
# ============================================================

LOGIN_SUCCESS = "Login successful!"
LOGIN_FAILED = "Login failed. Please try again."
LOGOUT_SUCCESS = "Logged out successfully!"
LOGOUT_FAILED = "Error logging out"
REGISTER_SUCCESS = "Registration successful! Please check your email to verify your account."
REGISTER_FAILED = "Registration failed. Please try again."
PASSWORDS_DONT_MATCH = "Passwords do not match."
WEAK_PASSWORD = "Password should be at least 6 characters."
SESSION_EXPIRED = "Your session has expired. Please log in again."
MIN_PASSWORD_LENGTH = 6

# Identity provider error codes -> user-facing text
IDENTITY_ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "Invalid email or password.",
    "INVALID_PASSWORD": "Invalid email or password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many failed attempts. Please try again later.",
    "USER_DISABLED": "This account has been disabled.",
    "INVALID_EMAIL": "Please enter a valid email address.",
    "EMAIL_EXISTS": "An account with this email already exists.",
    "WEAK_PASSWORD": WEAK_PASSWORD,
    "OPERATION_NOT_ALLOWED": "Email/password accounts are not enabled.",
}

# ============================================================
# DOCUMENTS
# ============================================================

UPLOAD_SUCCESS = "Document uploaded successfully!"
UPLOAD_FAILED = "Upload failed. Please try again."
FILE_TOO_LARGE = "File size should be less than 10MB"
FILE_TYPE_NOT_ALLOWED = "Please select a PDF, JPG, or PNG file"
NO_FILE_SELECTED = "Please select a file to upload"
TITLE_REQUIRED = "Please enter a document title"
CATEGORY_INVALID = "Please select a valid document category"

DOCUMENT_NOT_FOUND = "Document not found"
DOCUMENT_LOAD_FAILED = "Failed to load document"
DOWNLOAD_SUCCESS = "Document downloaded successfully"
DOWNLOAD_FAILED = "Failed to download document"
DELETE_CONFIRM = "Are you sure you want to delete this document? This action cannot be undone."
DELETE_SUCCESS = "Document deleted successfully"
DELETE_FAILED = "Failed to delete document"
SHARE_SUCCESS = "Document shared successfully"
SHARE_FAILED = "Failed to share document"

DOCUMENTS_EMPTY = "No documents uploaded yet"
DOCUMENTS_LOAD_ERROR = "Error loading documents"
SHARED_DOCUMENTS_EMPTY = "No documents have been shared with you"
SHARED_DOCUMENTS_LOAD_ERROR = "Error loading shared documents"
UPLOAD_PROMPT_TITLE = "Click to upload or drag and drop"
UPLOAD_PROMPT_HINT = "PDF, JPG, PNG files only (Max 10MB)"

DEFAULT_DOWNLOAD_NAME = "document"

# ============================================================
# FAMILY
# ============================================================

FILL_ALL_FIELDS = "Please fill in all fields"
INVALID_EMAIL = "Please enter a valid email address."
INVALID_ROLE = "Please choose a valid family role"
INVITE_SUCCESS = "Invitation sent successfully"
INVITE_FAILED = "Failed to send invitation. Please try again."
GROUP_CREATED = "Family group created successfully!"
GROUP_CREATE_FAILED = "Failed to create family group"

INVALID_INVITATION_TOKEN = "Invalid invitation token. Please refresh the page."
ACCEPT_SUCCESS = "Invitation accepted successfully!"
ACCEPT_FAILED = "Failed to accept invitation. Please try again."
DECLINE_CONFIRM = "Are you sure you want to decline this invitation?"
DECLINE_SUCCESS = "Invitation declined"
DECLINE_FAILED = "Failed to decline invitation. Please try again."
CANCEL_INVITE_CONFIRM = "Are you sure you want to cancel this invitation?"
CANCEL_INVITE_SUCCESS = "Invitation cancelled successfully"
CANCEL_INVITE_FAILED = "Failed to cancel invitation. Please try again."
RESEND_SUCCESS = "Invitation resent successfully"
RESEND_FAILED = "Failed to resend invitation. Please try again."
REMOVE_MEMBER_CONFIRM = "Are you sure you want to remove this family member?"
REMOVE_MEMBER_SUCCESS = "Family member removed successfully"
REMOVE_MEMBER_FAILED = "Failed to remove family member. Please try again."
NO_FAMILY_GROUP = "You have no family group yet"

FAMILY_EMPTY = "No Family Members Yet"
FAMILY_EMPTY_HINT = "Start by inviting family members to share documents securely."
FAMILY_LOAD_ERROR = "Failed to load family members. Please try again."
INVITATIONS_EMPTY = "No pending invitations."
INVITATIONS_LOAD_ERROR = "Failed to load invitations."

# ============================================================
# PROFILE
# ============================================================

PROFILE_UPDATED = "Profile updated successfully!"
PROFILE_UPDATE_FAILED = "Failed to update profile. Please try again."
PROFILE_LOAD_ERROR = "Profile details are unavailable right now."
PROFILE_PICTURE_UPDATED = "Profile picture updated successfully"
PROFILE_PICTURE_FAILED = "Failed to upload profile picture"
PROFILE_PICTURE_TYPES = ("image/jpeg", "image/png")
INVALID_AADHAAR = "Please enter a valid 12-digit Aadhaar number"
AADHAAR_LINKED = "Aadhaar linked successfully. Please verify with OTP."
AADHAAR_VERIFIED = "Aadhaar verified successfully!"
AADHAAR_LINK_FIRST = "Please link your Aadhaar before verifying"
INVALID_OTP = "Please enter a valid 6-digit OTP"
INVALID_PAN = "Please enter a valid PAN number"
PAN_ADDED = "PAN details added successfully"
ADDRESS_SAVED = "Address saved successfully"
ADDRESS_DELETE_CONFIRM = "Are you sure you want to delete this address?"
ADDRESS_DELETED = "Address deleted successfully"
ADDRESS_TYPES = ("permanent", "current", "office")
INVALID_ADDRESS_TYPE = "Please choose a permanent, current or office address"
SECURITY_SETTINGS_UPDATED = "Security settings updated"
SECURITY_QUESTIONS_INCOMPLETE = "Please fill in all security questions and answers"
SECURITY_QUESTIONS_DUPLICATE = "Please choose different security questions"
SECURITY_QUESTIONS_SAVED = "Security questions saved successfully"

# ============================================================
# OVERVIEW
# ============================================================

OVERVIEW_LOAD_ERROR = "Unable to load dashboard statistics"
GENERIC_ERROR = "Something went wrong. Please try again."
