import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import bids.prompts


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, max_length=100)),
                ("skills", models.JSONField(blank=True, default=list)),
                ("experience", models.TextField(blank=True)),
                ("bio", models.TextField(blank=True)),
                ("hourly_rate", models.FloatField(default=50, validators=[django.core.validators.MinValueValidator(0)])),
                ("portfolio", models.JSONField(blank=True, default=list, help_text="List of portfolio URLs")),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="AISettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("provider", models.CharField(choices=[("openai", "OpenAI"), ("anthropic", "Anthropic"), ("custom", "Custom (OpenAI-compatible)")], default="openai", max_length=20)),
                ("api_key", models.CharField(blank=True, max_length=255)),
                ("model", models.CharField(default="gpt-4o", max_length=100)),
                ("temperature", models.FloatField(default=0.7, validators=[django.core.validators.MinValueValidator(0.0), django.core.validators.MaxValueValidator(1.0)])),
                ("max_tokens", models.PositiveIntegerField(default=1000, validators=[django.core.validators.MinValueValidator(1)])),
                ("system_prompt", models.TextField(blank=True, default=bids.prompts.DEFAULT_SYSTEM_PROMPT)),
                ("base_url", models.URLField(blank=True, help_text="Endpoint for the custom provider")),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="ai_settings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "AI settings",
                "verbose_name_plural": "AI settings",
            },
        ),
        migrations.CreateModel(
            name="MarketplaceAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("access_token", models.CharField(blank=True, max_length=255)),
                ("sandbox", models.BooleanField(default=True)),
                ("default_bid_strategy", models.CharField(choices=[("competitive", "Competitive"), ("premium", "Premium"), ("budget", "Budget")], default="competitive", max_length=20)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="marketplace_account", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="Project",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bid_projects", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at", "-id"),
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("proposal", "Client proposal"), ("bid", "Generated bid"), ("client", "Client"), ("me", "Me")], max_length=10)),
                ("content", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("project", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="messages", to="bids.project")),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
    ]
