# ==========================================
# apps/users/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, SubscriptionTier


def _badge(label, bg, fg='white'):
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        bg, fg, label
    )


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for users.

    Lists subscription tier and trial end alongside the usual status flags,
    with bulk actions to move users between tiers.
    """

    list_display = [
        'email',
        'display_name',
        'tier_badge',
        'trial_end_date',
        'is_active_badge',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'subscription_tier',
        'is_active',
        'is_staff',
        'email_verified',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    # BaseUserAdmin assumes a username field
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'password')
        }),
        ('Subscription', {
            'fields': ('subscription_tier', 'trial_end_date'),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Verification & reset', {
            'fields': ('email_verified', 'password_reset_token'),
            'classes': ('collapse',),
        }),
        ('Preferences', {
            'fields': ('preferences',),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
        ('Subscription', {
            'fields': ('subscription_tier',),
        }),
    )

    readonly_fields = [
        'created_at',
        'last_login',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def tier_badge(self, obj):
        if obj.is_pro:
            return _badge('Pro', '#2E7D32')
        return _badge('Free', '#ccc', '#666')
    tier_badge.short_description = 'Tier'
    tier_badge.admin_order_field = 'subscription_tier'

    def is_active_badge(self, obj):
        """Display active status as colored badge."""
        if obj.is_active:
            return _badge('Active', '#2E7D32')
        return _badge('Inactive', '#C62828')
    is_active_badge.short_description = 'Status'
    is_active_badge.admin_order_field = 'is_active'

    actions = ['upgrade_to_pro', 'downgrade_to_free']

    @admin.action(description='Upgrade selected users to Pro')
    def upgrade_to_pro(self, request, queryset):
        count = queryset.update(subscription_tier=SubscriptionTier.PRO)
        self.message_user(request, f'Upgraded {count} user(s).')

    @admin.action(description='Downgrade selected users to Free')
    def downgrade_to_free(self, request, queryset):
        count = queryset.filter(is_superuser=False).update(
            subscription_tier=SubscriptionTier.FREE
        )
        self.message_user(request, f'Downgraded {count} user(s).')
