"""
Server-wide constants.
"""

PROJECT_NAME = "Jalanea Forge"
API_V1_STR = "/api/v1"
VERSION = "1.0.0"
SCHEMA_VERSION = "v1"

LAB_AUTH_COOKIE = "jalanea_lab_auth"
