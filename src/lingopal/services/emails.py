"""HTML email templates."""

from html import escape

RESET_SUBJECT = "Your Password Reset Request"

MALE_HEADER_IMAGE = "https://i.imgur.com/rNTOOMm.jpeg"
FEMALE_HEADER_IMAGE = "https://i.imgur.com/Kqkfd69.jpeg"

_RESET_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: auto; border: 1px solid #ddd; border-radius: 10px; overflow: hidden; box-shadow: 0 4px 8px rgba(0,0,0,0.1);">
    <img src="{header_image}" alt="Header Image" style="width: 100%; height: auto; display: block;">
    <div style="padding: 24px; line-height: 1.6; color: #333;">
        <h2 style="color: #1e40af; text-align: center;">Password Reset</h2>
        <p style="font-size: 16px;">Hello {full_name},</p>
        <p style="font-size: 16px;">You requested a password reset. Please click the button below to create a new password. This link is valid for {valid_for}.</p>
        <div style="text-align: center; margin: 25px 0;">
            <a href="{reset_url}" style="background-color: #4f46e5; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; display: inline-block; font-weight: bold;">Reset Your Password</a>
        </div>
        <p style="margin-top: 20px; font-size: 14px; color: #666;">If you did not request this, please ignore this email.</p>
        <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
        <p style="font-size: 12px; text-align: center; color: #999;">The {team_name} Team</p>
    </div>
</div>
"""


def reset_url(frontend_url: str, token: str) -> str:
    """Link into the frontend's hash-routed reset page."""
    return f"{frontend_url}/#/reset-password/{token}"


def _valid_for(minutes: int) -> str:
    if minutes % 60 == 0:
        hours = minutes // 60
        return "1 hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minutes"


def render_reset_email(
    *,
    full_name: str,
    gender: str,
    url: str,
    valid_minutes: int = 60,
    team_name: str = "AI English Assistant",
) -> str:
    header = MALE_HEADER_IMAGE if gender == "male" else FEMALE_HEADER_IMAGE
    return _RESET_TEMPLATE.format(
        header_image=header,
        full_name=escape(full_name),
        reset_url=escape(url, quote=True),
        valid_for=_valid_for(valid_minutes),
        team_name=escape(team_name),
    )
