# bids/services/conversation.py
import logging

from django.conf import settings
from django.db import transaction

from bids.errors import ConversationError
from bids.models import Message, Project
from bids.schemas import HistoryEntry

logger = logging.getLogger(__name__)


def _expected_turn(project):
    """The turn type that keeps client/me alternating, or None if either is fine."""
    last = project.messages.filter(type__in=Message.TURN_TYPES).last()
    if last is None:
        return None
    return Message.ME if last.type == Message.CLIENT else Message.CLIENT


def check_turn(project, message_type):
    """
    Raises ConversationError if strict alternation is on and message_type is out of turn.
    Returns the expected turn type (None when either is fine).
    """
    expected = _expected_turn(project)
    if expected is not None and expected != message_type and settings.BID_DESK_STRICT_ALTERNATION:
        raise ConversationError(f"Expected a '{expected}' message next, got '{message_type}'.")
    return expected


@transaction.atomic
def append_message(project: Project, message_type: str, content: str) -> Message:
    """
    Atomically append one message to a project's conversation log.
    Seed messages (proposal, bid) may appear once; client/me turns should alternate.
    """
    if message_type not in dict(Message.TYPE_CHOICES):
        raise ConversationError(f"Unknown message type: {message_type}")
    if not (content or "").strip():
        raise ConversationError("Message content is required.")

    # Lock the parent row so concurrent appends to one project are serialized
    project = Project.objects.select_for_update().get(pk=project.pk)

    if message_type in Message.SEED_TYPES:
        if project.messages.filter(type=message_type).exists():
            raise ConversationError(f"This project already has a {message_type} message.")
    else:
        expected = check_turn(project, message_type)
        if expected is not None and expected != message_type:
            logger.warning(
                "Project %s: '%s' message appended out of turn (expected '%s')",
                project.pk, message_type, expected,
            )

    return Message.objects.create(project=project, type=message_type, content=content)


@transaction.atomic
def create_project(user, title, proposal="", generated_bid=""):
    """Creates a project seeded with the client's proposal and our bid, when given."""
    title = (title or "").strip()
    if not title:
        raise ConversationError("Title is required")

    project = Project.objects.create(user=user, title=title)
    if (proposal or "").strip():
        Message.objects.create(project=project, type=Message.PROPOSAL, content=proposal)
    if (generated_bid or "").strip():
        Message.objects.create(project=project, type=Message.BID, content=generated_bid)
    logger.info("Created project %s for %s", project.pk, user.username)
    return project


@transaction.atomic
def record_exchange(project, client_reply, my_reply):
    """Stores a client message and the reply generated for it, or neither."""
    client_message = append_message(project, Message.CLIENT, client_reply)
    my_message = append_message(project, Message.ME, my_reply)
    return client_message, my_message


def history_for(project):
    return [HistoryEntry(type=m.type, content=m.content) for m in project.conversation()]
