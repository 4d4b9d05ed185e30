# Supabase Auth
# This module uses Supabase's built-in authentication system
# Lumos adds no auth tables of its own - Supabase Auth handles:
# - User registration (auth.users table)
# - Sign in and session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Sign users out
- auth.update_user() - Update the signed in user's metadata

When email confirmation is enabled sign_up returns no session. The onboarding
input (role + profile) is then parked in user_metadata.pending_profile and
written to the role tables on the first successful sign in.
"""
