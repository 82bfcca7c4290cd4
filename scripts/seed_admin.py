#!/usr/bin/env python3
"""
Create the first administrator account - does not depend on app/

Reads DATABASE_URL, ADMIN_EMAIL and ADMIN_PASSWORD from the environment
(or a .env file). Run scripts/setup_database.py first.
"""
import os
import sys
import uuid

import psycopg2
from psycopg2.extras import RealDictCursor
from passlib.context import CryptContext
from dotenv import load_dotenv

def main() -> bool:
    print("🚀 Blyne Logistics - creating the administrator...")

    load_dotenv()

    DATABASE_URL = os.getenv("DATABASE_URL")
    email = (os.getenv("ADMIN_EMAIL") or "").strip().lower()
    password = os.getenv("ADMIN_PASSWORD")

    if not DATABASE_URL:
        print("❌ ERROR: DATABASE_URL is missing from the environment or .env")
        return False
    if not email or not password:
        print("❌ ERROR: ADMIN_EMAIL and ADMIN_PASSWORD are required")
        return False
    if len(password) < 8:
        print("❌ ERROR: ADMIN_PASSWORD must have at least 8 characters")
        return False

    print(f"🔌 Connecting to: {DATABASE_URL.split('@')[1] if '@' in DATABASE_URL else 'database'}...")

    conn = psycopg2.connect(DATABASE_URL)
    try:
        cursor = conn.cursor(cursor_factory=RealDictCursor)

        cursor.execute("""
            SELECT table_name FROM information_schema.tables
            WHERE table_schema = 'public' AND table_name = 'users'
        """)
        if not cursor.fetchone():
            print("❌ Table 'users' does not exist")
            print("💡 Run scripts/setup_database.py first")
            return False

        pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

        cursor.execute("SELECT id, role FROM users WHERE email = %s", (email,))
        existing = cursor.fetchone()

        if existing:
            cursor.execute(
                "UPDATE users SET role = 'admin', is_active = true, updated_at = NOW() WHERE id = %s",
                (existing["id"],)
            )
            print(f"🔄 Existing account {email} promoted to admin (was {existing['role']})")
        else:
            cursor.execute("""
                INSERT INTO users (id, email, password_hash, first_name, last_name, role, is_active, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, 'admin', true, NOW(), NOW())
                RETURNING id
            """, (str(uuid.uuid4()), email, pwd_context.hash(password), "Admin", "Blyne"))
            created = cursor.fetchone()
            print(f"✅ Administrator created: {email} ({created['id']})")

        conn.commit()
        return True
    except psycopg2.Error as e:
        conn.rollback()
        print(f"❌ Database error: {e}")
        return False
    finally:
        conn.close()

if __name__ == "__main__":
    sys.exit(0 if main() else 1)
