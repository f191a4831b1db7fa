#!/usr/bin/env python3
"""Print a new cookie.secret_key value."""

from securelogin.cookie import generate_key

if __name__ == "__main__":
    print(generate_key())
