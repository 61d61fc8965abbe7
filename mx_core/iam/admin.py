# mx_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from mx_core.iam.models import ClinicMembership, UserProfile


class ClinicMembershipInline(admin.TabularInline):
    model = ClinicMembership
    extra = 0
    autocomplete_fields = ("clinic",)


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "role", "status", "clinic", "mcr_number", "created_at")
    list_filter = ("role", "status", "clinic")
    search_fields = ("name", "user__username", "user__email", "mcr_number")
    autocomplete_fields = ("user", "clinic")
    inlines = [ClinicMembershipInline]
    ordering = ("-created_at",)


@admin.register(ClinicMembership)
class ClinicMembershipAdmin(admin.ModelAdmin):
    list_display = ("clinic", "profile", "is_primary", "is_active")
    list_filter = ("clinic", "is_primary", "is_active")
    search_fields = ("clinic__name", "profile__name", "profile__user__email")
    autocomplete_fields = ("clinic", "profile")
