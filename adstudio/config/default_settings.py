"""
Default System Settings
Rows written to the system_settings table by scripts/seed_defaults.py.
Existing keys are never overwritten so admin edits survive a re-seed.
"""

SETTING_CATEGORIES = ("general", "security", "upload", "email", "system")

DEFAULT_SETTINGS = [
    # General
    {"key": "site_name", "value": "Content Generation Platform",
     "description": "The name of the website/platform", "category": "general", "is_public": True},
    {"key": "site_description", "value": "AI-powered content generation platform",
     "description": "Brief description of the platform", "category": "general", "is_public": True},
    {"key": "maintenance_mode", "value": "false",
     "description": "Whether the site is in maintenance mode", "category": "system", "is_public": False},

    # Security
    {"key": "password_min_length", "value": "8",
     "description": "Minimum password length required", "category": "security", "is_public": False},
    {"key": "max_login_attempts", "value": "5",
     "description": "Maximum failed login attempts before lockout", "category": "security", "is_public": False},

    # Upload
    {"key": "max_file_size_mb", "value": "100",
     "description": "Maximum file upload size in MB", "category": "upload", "is_public": True},
    {"key": "allowed_file_types", "value": "mp4,avi,mov,jpg,jpeg,png,gif",
     "description": "Comma-separated list of allowed file types", "category": "upload", "is_public": True},
    {"key": "video_generation_limit", "value": "10",
     "description": "Maximum videos a user can generate per day", "category": "upload", "is_public": False},

    # Email
    {"key": "email_verification_required", "value": "true",
     "description": "Whether email verification is required for new users", "category": "email", "is_public": False},
    {"key": "welcome_email_enabled", "value": "true",
     "description": "Whether to send welcome emails to new users", "category": "email", "is_public": False},
    {"key": "password_reset_enabled", "value": "true",
     "description": "Whether password reset functionality is enabled", "category": "email", "is_public": False},

    # System
    {"key": "rate_limit_requests", "value": "100",
     "description": "Maximum API requests per time window", "category": "system", "is_public": False},
    {"key": "debug_mode", "value": "false",
     "description": "Whether debug mode is enabled", "category": "system", "is_public": False},
    {"key": "default_char_limit", "value": "500",
     "description": "Default character limit for text variables in templates", "category": "system", "is_public": False},
]
