# bids/models.py
from django.db import models
from django.contrib.auth.models import User
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator

from .errors import ImmutableMessageError
from .prompts import DEFAULT_SYSTEM_PROMPT
from .schemas import AIConfig, ProfileSnapshot

PROVIDER_CHOICES = [
    ("openai", "OpenAI"),
    ("anthropic", "Anthropic"),
    ("custom", "Custom (OpenAI-compatible)"),
]

BID_STRATEGY_CHOICES = [
    ("competitive", "Competitive"),
    ("premium", "Premium"),
    ("budget", "Budget"),
]


def _dedupe(items):
    """Keeps first occurrence, compares case-insensitively, drops blanks."""
    seen = set()
    result = []
    for item in items or []:
        item = str(item).strip()
        if item and item.lower() not in seen:
            seen.add(item.lower())
            result.append(item)
    return result


class Profile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE)
    name = models.CharField(max_length=100, blank=True)
    skills = models.JSONField(default=list, blank=True)
    experience = models.TextField(blank=True)
    bio = models.TextField(blank=True)
    hourly_rate = models.FloatField(default=50, validators=[MinValueValidator(0)])
    portfolio = models.JSONField(default=list, blank=True, help_text="List of portfolio URLs")

    def __str__(self):
        return self.name or self.user.username

    @classmethod
    def for_user(cls, user):
        profile, _ = cls.objects.get_or_create(user=user)
        return profile

    def save(self, *args, **kwargs):
        self.skills = _dedupe(self.skills)
        self.portfolio = [p for p in (str(u).strip() for u in self.portfolio or []) if p]
        super().save(*args, **kwargs)

    def snapshot(self):
        return ProfileSnapshot(
            name=self.name,
            skills=tuple(self.skills or ()),
            experience=self.experience,
            bio=self.bio,
            hourly_rate=self.hourly_rate,
            portfolio=tuple(self.portfolio or ()),
        )

    def as_dict(self):
        return {
            "name": self.name,
            "skills": list(self.skills or []),
            "experience": self.experience,
            "bio": self.bio,
            "hourlyRate": self.hourly_rate,
            "portfolio": list(self.portfolio or []),
        }


class AISettings(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="ai_settings")
    provider = models.CharField(max_length=20, choices=PROVIDER_CHOICES, default="openai")
    api_key = models.CharField(max_length=255, blank=True)
    model = models.CharField(max_length=100, default="gpt-4o")
    temperature = models.FloatField(
        default=0.7, validators=[MinValueValidator(0.0), MaxValueValidator(1.0)]
    )
    max_tokens = models.PositiveIntegerField(default=1000, validators=[MinValueValidator(1)])
    system_prompt = models.TextField(default=DEFAULT_SYSTEM_PROMPT, blank=True)
    base_url = models.URLField(blank=True, help_text="Endpoint for the custom provider")

    class Meta:
        verbose_name = "AI settings"
        verbose_name_plural = "AI settings"

    def __str__(self):
        return f"{self.user.username} - {self.provider}/{self.model}"

    @classmethod
    def for_user(cls, user):
        ai_settings, _ = cls.objects.get_or_create(
            user=user, defaults={"api_key": settings.OPENAI_API_KEY}
        )
        return ai_settings

    @property
    def masked_api_key(self):
        if not self.api_key:
            return ""
        return "*" * max(len(self.api_key) - 4, 4) + self.api_key[-4:]

    def snapshot(self):
        return AIConfig(
            provider=self.provider,
            api_key=self.api_key,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            system_prompt=self.system_prompt,
            base_url=self.base_url,
        )

    def as_dict(self):
        return {
            "provider": self.provider,
            "apiKey": self.masked_api_key,
            "hasApiKey": bool(self.api_key),
            "model": self.model,
            "temperature": self.temperature,
            "maxTokens": self.max_tokens,
            "systemPrompt": self.system_prompt,
            "baseUrl": self.base_url,
        }


class MarketplaceAccount(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="marketplace_account")
    access_token = models.CharField(max_length=255, blank=True)
    sandbox = models.BooleanField(default=True)
    default_bid_strategy = models.CharField(
        max_length=20, choices=BID_STRATEGY_CHOICES, default="competitive"
    )

    def __str__(self):
        return f"Marketplace account for {self.user.username}"

    @classmethod
    def for_user(cls, user):
        account, _ = cls.objects.get_or_create(user=user)
        return account

    def as_dict(self):
        return {
            "hasAccessToken": bool(self.access_token),
            "sandbox": self.sandbox,
            "defaultBidStrategy": self.default_bid_strategy,
        }


class Project(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="bid_projects")
    title = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self):
        return self.title

    def _seed(self, message_type):
        message = self.messages.filter(type=message_type).first()
        return message.content if message else None

    @property
    def proposal(self):
        return self._seed(Message.PROPOSAL) or ""

    @property
    def generated_bid(self):
        return self._seed(Message.BID)

    def conversation(self):
        return self.messages.filter(type__in=Message.TURN_TYPES)

    def as_dict(self, with_messages=True):
        data = {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at.isoformat(),
        }
        if with_messages:
            messages = list(self.messages.all())
            data["messages"] = [m.as_dict() for m in messages]
            data["proposal"] = next((m.content for m in messages if m.type == Message.PROPOSAL), "")
            data["generatedBid"] = next((m.content for m in messages if m.type == Message.BID), None)
            data["conversation"] = [m.as_dict() for m in messages if m.type in Message.TURN_TYPES]
        return data


class Message(models.Model):
    PROPOSAL = "proposal"
    BID = "bid"
    CLIENT = "client"
    ME = "me"
    TYPE_CHOICES = [
        (PROPOSAL, "Client proposal"),
        (BID, "Generated bid"),
        (CLIENT, "Client"),
        (ME, "Me"),
    ]
    SEED_TYPES = (PROPOSAL, BID)
    TURN_TYPES = (CLIENT, ME)

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="messages")
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Message ({self.type}) - {self.project_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableMessageError("Messages cannot be edited once saved.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableMessageError("Delete the whole project to remove its messages.")

    def as_dict(self):
        return {
            "id": self.id,
            "type": self.type,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
        }
