#!/usr/bin/env python3
"""
Generate a secure SECRET_KEY for Props With Pals
The key signs the session cookie that carries players' pool secrets
"""

import secrets


def generate_secrets():
    """Generate a secure random key for the application"""
    print("🔐 Generating secure secrets for Props With Pals...")
    print("=" * 50)

    print(f"SECRET_KEY={secrets.token_urlsafe(32)}")

    print("=" * 50)
    print("📝 Copy this value to your .env file")
    print("⚠️  Rotating it signs every player out of their pools!")


if __name__ == "__main__":
    generate_secrets()
