"""Authentication and authorization.

Learn: Users log in with email-or-username + password and receive a
stateless JWT. Every protected route runs the Identity Gate
(get_current_user), which verifies the token AND re-loads the user, so a
token outliving its account is useless. Admin routes stack require_admin
on top.
"""
