BACKEND_URL = "http://backend.test/api"

PATRON_EMAIL = "patron@example.com"
PATRON_PASSWORD = "secret1"
ADMIN_EMAIL = "admin@theater.com"
ADMIN_PASSWORD = "admin123"
