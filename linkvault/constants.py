"""Application-wide constants and defaults."""

# Phrases resolvers put in placeholder content when nothing could be read
EXTRACTION_FAILURE_PHRASES = (
    "content could not be extracted",
    "tweet content could not be extracted",
    "instagram content could not be extracted",
    "failed to extract",
    "unable to extract",
)

# Phrases the summarizer emits instead of a real summary
SUMMARY_FALLBACK_PHRASES = (
    "content could not be extracted",
    "summarization failed",
    "summary unavailable",
    "image could not be analyzed",
)

FAILURE_TAGS = frozenset({"llm_failed", "processing_failed", "extraction_failed"})

# Author value a resolver reports when it could not identify one
UNKNOWN_AUTHOR = "Unknown"

MIN_CONTENT_CHARS = 20
MIN_SINGLE_BULLET_CHARS = 30

# Terminal failure state written by the enrichment pipeline
PROCESSING_FAILED_TAG = "processing_failed"
PROCESSING_FAILED_SUMMARY = (
    "Failed to process this URL. The content could not be extracted or summarized. "
    "Please open the original link."
)

# Tag normalization
MAX_TAG_LENGTH = 50
MIN_TAG_LENGTH = 2

# Image-mode summarization eligibility
VISION_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")
VISION_BLOCKED_HOSTS = ("cdninstagram.com", "fbcdn.net")
PROFILE_PICTURE_MARKERS = ("t51.2885-19", "profile_pic")
INSTAGRAM_THUMBNAIL_SIZE = "s150x150"
INSTAGRAM_FULL_SIZE = "s1080x1080"

# Placeholder content returned when a platform refuses every source
INSTAGRAM_PLACEHOLDER = "Instagram content could not be extracted. Please view the original post."
TWEET_PLACEHOLDER = "Tweet content could not be extracted."
LINKEDIN_PLACEHOLDER_SHORT = "LinkedIn post content. View the original post for full details."
