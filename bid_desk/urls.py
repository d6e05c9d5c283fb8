# bid_desk/urls.py

from django.contrib import admin
from django.contrib.auth import views as auth_views
from django.shortcuts import redirect
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("logout/", auth_views.LogoutView.as_view(), name="logout"),
    path("", lambda request: redirect("dashboard"), name="home"),

    # App URLs
    path("api/", include("bids.urls")),  # dashboard, profile, settings, projects, generation
]
