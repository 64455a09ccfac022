# Log events / error codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
INVALID_URL = 'INVALID_URL'
SHORTCODE_SPACE_EXHAUSTED = 'SHORTCODE_SPACE_EXHAUSTED'
SHORT_URL_CREATED = 'SHORT_URL_CREATED'

# Request body keys, in order of preference
URL_KEYS = ('url', 'target_url')

# Attributes of the session cookie issued to callers without a network identity
SESSION_COOKIE_ATTRIBUTES = 'Path=/; HttpOnly; Secure; SameSite=Lax'
