"""CORS configuration."""

import os

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
] + [
    origin.strip()
    for origin in os.getenv("TOUR_ALLOWED_ORIGINS", "").split(",")
    if origin.strip()
]
