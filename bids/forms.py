# bids/forms.py
from django import forms
from django.core.validators import URLValidator
from django.core.exceptions import ValidationError

from .models import AISettings, MarketplaceAccount, Message, Profile
from .schemas import DEFAULT_ANTHROPIC_MODEL


def _string_list(value, field_name):
    """Accepts a JSON list or a comma-separated string."""
    if value in (None, ""):
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{field_name} must be a list of strings.")
    return [v.strip() for v in value if v.strip()]


class ListField(forms.Field):
    def to_python(self, value):
        return _string_list(value, self.label or "Value")


class ProfileForm(forms.ModelForm):
    skills = ListField(required=False, label="Skills")
    portfolio = ListField(required=False, label="Portfolio")

    class Meta:
        model = Profile
        fields = ["name", "skills", "experience", "bio", "hourly_rate", "portfolio"]

    def clean_portfolio(self):
        urls = self.cleaned_data["portfolio"]
        validate = URLValidator()
        for url in urls:
            validate(url)
        return urls


class AISettingsForm(forms.ModelForm):
    class Meta:
        model = AISettings
        fields = ["provider", "api_key", "model", "temperature", "max_tokens", "system_prompt", "base_url"]

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("provider") == "custom" and not cleaned.get("base_url"):
            self.add_error("base_url", "A base URL is required for the custom provider.")

        model = cleaned.get("model") or ""
        if cleaned.get("provider") == "anthropic" and not model.startswith("claude"):
            self.add_error("model", f"Anthropic models are named claude-*, e.g. {DEFAULT_ANTHROPIC_MODEL}.")
        elif cleaned.get("provider") == "openai" and model.startswith("claude"):
            self.add_error("model", "Claude models need the Anthropic provider.")
        return cleaned


class MarketplaceAccountForm(forms.ModelForm):
    class Meta:
        model = MarketplaceAccount
        fields = ["access_token", "sandbox", "default_bid_strategy"]


class ProjectForm(forms.Form):
    title = forms.CharField(max_length=200)
    proposal = forms.CharField(required=False, strip=False)
    generated_bid = forms.CharField(required=False, strip=False)

    def clean_title(self):
        title = self.cleaned_data["title"].strip()
        if not title:
            raise ValidationError("Title is required")
        return title


class MessageForm(forms.Form):
    type = forms.ChoiceField(choices=Message.TYPE_CHOICES)
    content = forms.CharField(strip=False)

    def clean_content(self):
        content = self.cleaned_data["content"]
        if not content.strip():
            raise ValidationError("Content is required")
        return content
