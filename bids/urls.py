# bids/urls.py
from django.urls import path
from . import views


urlpatterns = [
    path("dashboard/", views.dashboard, name="dashboard"),
    path("profile/", views.profile, name="profile"),
    path("settings/ai/", views.ai_settings, name="ai_settings"),
    path("settings/marketplace/", views.marketplace_settings, name="marketplace_settings"),
    path("projects/", views.projects, name="projects"),
    path("projects/<int:project_id>/", views.project_detail, name="project_detail"),
    path("projects/<int:project_id>/messages/", views.project_messages, name="project_messages"),
    path("projects/<int:project_id>/conversation.pdf", views.download_conversation_pdf, name="download_conversation_pdf"),
    path("generate/bid/", views.generate_bid, name="generate_bid"),
    path("generate/answers/", views.generate_answers, name="generate_answers"),
    path("generate/reply/", views.generate_reply, name="generate_reply"),
    path("marketplace/projects/", views.marketplace_projects, name="marketplace_projects"),
    path("marketplace/bids/", views.marketplace_bids, name="marketplace_bids"),
]
