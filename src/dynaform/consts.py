"""Constants for dynaform"""

# ==================== Ordering ====================
ORDER_DEFAULT = 999  # fields without a usable x-order sort last

# ==================== Errors ====================
FORM_ERROR_KEY = "_form"
SUBMIT_ERROR_MESSAGE = "An error occurred while submitting the form. Please try again."

# ==================== Sizes ====================
BYTES_PER_MB = 1024 * 1024

# ==================== Settings ====================
SETTINGS_ENV_PREFIX = "DYNAFORM_"
SETTINGS_FILE_DEFAULT = "dynaform.toml"
LOG_FILE_DEFAULT = "data/dynaform.log"
