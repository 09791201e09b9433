"""
utils/constants.py

Purpose: Centralized static content

- All user-facing bot messages
- Button labels and callback ids
- Response status codes for the envelope

(Prevents hardcoding across the codebase)
"""

# ============================================================
# RESPONSE STATUS CODES
# ============================================================

STATUS_OK = "OK"
STATUS_CREATED = "CREATED"
STATUS_SUCCESS = "SUCCESS"

# ============================================================
# COMMANDS & CALLBACKS
# ============================================================

CMD_START = "/start"
CMD_UPLOAD = "/upload"
CMD_MY_PRODUCTS = "/myproducts"
CMD_CANCEL = "/cancel"

CALLBACK_CONFIRM_UPLOAD = "confirm_upload"
CALLBACK_CANCEL_UPLOAD = "cancel_upload"
CALLBACK_BUY_PREFIX = "buy_"

# ============================================================
# WELCOME & COMMANDS
# ============================================================

NOT_REGISTERED_MESSAGE = (
    "You’re not registered as an artist. Please sign up on the website first "
    "and connect Telegram in your profile."
)

START_MESSAGE = "Hi {first_name}! Use /upload to submit a new artwork, /myproducts to view your products."

UNKNOWN_COMMAND_MESSAGE = "Unknown command. Use /start to see options."

UNKNOWN_ACTION_MESSAGE = "Unknown action."

# ============================================================
# UPLOAD FLOW
# ============================================================

ASK_MEDIA_TYPE_MESSAGE = """What do you want to upload?
1️⃣ Image
2️⃣ Video
3️⃣ Other (e.g., ZIP, PDF)"""

MEDIA_TYPE_BUTTONS = ["🖼 Image", "🎥 Video", "📄 Other (PDF/ZIP)"]

INVALID_MEDIA_TYPE_MESSAGE = "Please choose one of the options: Image, Video, or Other."

SEND_MEDIA_MESSAGES = {
    "image": "Please send the image file now.",
    "video": "Please send the video file now.",
    "other": "Please send the document (PDF/ZIP) now.",
}

UPLOAD_FIRST_MESSAGE = "Please start an upload with /upload first."

UNSUPPORTED_MEDIA_MESSAGE = "Unsupported file type. Please send an image, video, or document."

ASK_TITLE_MESSAGE = "Great! Now send the title of this artwork."

ASK_DESCRIPTION_MESSAGE = "Please send a short description (max {limit} characters)."

DESCRIPTION_TOO_LONG_MESSAGE = "Description is too long. Please keep it under {limit} characters."

ASK_PRICE_MESSAGE = "Enter the price (in INR), numbers only. Example: 499"

INVALID_PRICE_MESSAGE = "Invalid price. Enter a positive number (e.g., 499)."

ASK_CATEGORY_MESSAGE = "Enter category (e.g., Abstract, Portrait, Landscape) or choose from buttons."

CATEGORY_BUTTONS = ["Abstract", "Portrait", "Landscape"]

ASK_STOCK_MESSAGE = "How many copies are available? (Enter a number, or 0 for unlimited digital copies.)"

INVALID_STOCK_MESSAGE = "Invalid stock. Enter 0 (unlimited) or a positive number."

NOT_EXPECTED_MESSAGE = "I don’t understand that right now. Use /upload to start over."

PREVIEW_CAPTION = "Preview:"

SUMMARY_MESSAGE = """*Title*: {title}
*Description*: {description}
*Price*: ₹{price}
*Category*: {category}
*Stock*: {stock}"""

CONFIRM_BUTTON_TEXT = "✅ Confirm & Publish"
CANCEL_BUTTON_TEXT = "❌ Cancel"

# ============================================================
# PUBLISH
# ============================================================

PUBLISHED_MESSAGE = """✅ Your artwork has been published!
Live link: {link}"""

PUBLISH_FAILED_MESSAGE = "Something went wrong while publishing. Press Confirm to try again, or /cancel."

SESSION_EXPIRED_MESSAGE = "Session expired. Please start over with /upload."

UPLOAD_CANCELLED_MESSAGE = "Upload cancelled. Use /upload to start again."

NOTHING_TO_CANCEL_MESSAGE = "There is no upload in progress."

# ============================================================
# PRODUCTS & PAYMENTS
# ============================================================

NO_PRODUCTS_MESSAGE = "You haven’t uploaded any products yet. Use /upload to add one."

PRODUCTS_HEADER = "Your products:"

PRODUCTS_FAILED_MESSAGE = "Failed to fetch your products. Please try again later."

PURCHASE_COMING_SOON_MESSAGE = "Purchase flow coming soon!"

PAYMENT_RECEIVED_MESSAGE = "✅ Payment received! Your order is confirmed."

# ============================================================
# API MESSAGES
# ============================================================

MSG_ADDED = "Record added successfully"
MSG_UPDATED = "Record updated successfully"
MSG_FETCHED = "Records fetched successfully"
MSG_DELETED = "Record deleted successfully"
MSG_NOT_FOUND = "Record not found"
MSG_UPLOADED = "File uploaded successfully"

OTP_SENT = "OTP sent to your email"
INVALID_OTP = "Invalid or expired OTP"
EMAIL_EXISTS = "An account with this email already exists"
ACCOUNT_CREATED = "Account verified and created successfully"
LOGIN_SUCCESS = "Login successful"
ACCOUNT_NOT_FOUND = "Account not found"
WRONG_PASSWORD = "Incorrect password"
ADMIN_ONLY = "Only admins can sign in here"
USER_PROFILE = "User profile"
PROFILE_UPDATED = "Profile updated successfully"
CURRENT_PASSWORD_REQUIRED = "Current password is required to change the password"
CURRENT_PASSWORD_INCORRECT = "Current password is incorrect"
RESET_OTP_SENT = "If an account exists for this email, an OTP has been sent"
PASSWORD_RESET = "Password reset successfully"
