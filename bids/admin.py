# bids/admin.py
from django.contrib import admin
from .models import AISettings, MarketplaceAccount, Message, Profile, Project


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "name", "hourly_rate")
    search_fields = ("name", "user__username")


@admin.register(AISettings)
class AISettingsAdmin(admin.ModelAdmin):
    list_display = ("user", "provider", "model", "temperature", "max_tokens")
    list_filter = ("provider",)
    exclude = ("api_key",)


@admin.register(MarketplaceAccount)
class MarketplaceAccountAdmin(admin.ModelAdmin):
    list_display = ("user", "sandbox", "default_bid_strategy")
    exclude = ("access_token",)


class MessageInline(admin.TabularInline):
    model = Message
    fields = ("type", "content", "created_at")
    readonly_fields = ("type", "content", "created_at")
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "created_at", "message_count")
    list_filter = ("created_at",)
    search_fields = ("title", "messages__content")
    inlines = [MessageInline]

    def message_count(self, obj):
        return obj.messages.count()
    message_count.short_description = "Messages"
