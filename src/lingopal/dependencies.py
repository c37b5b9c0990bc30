"""App-scoped FastAPI dependencies.

Learn: Long-lived collaborators (settings, mailer, AI client) are built
once in create_app() and parked on app.state. Handlers reach them through
these functions, which also gives tests one override point each.
"""

from fastapi import Request

from lingopal.config import Settings
from lingopal.services.mailer import Mailer
from lingopal.services.tutor_ai import TutorAI


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_tutor_ai(request: Request) -> TutorAI:
    return request.app.state.tutor_ai
