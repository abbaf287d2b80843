"""
Core Admin - base class with automatic organization filtering
"""

from django.contrib import admin

from .models import Organization


class OrganizationScopedAdmin(admin.ModelAdmin):
    """
    Base admin that limits staff users to their own organization.
    Superusers see everything.
    """

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        org_id = getattr(request.user, 'organization_id', None)
        if not org_id or not hasattr(self.model, 'organization_id'):
            return qs.none()
        return qs.filter(organization_id=org_id)

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        if not request.user.is_superuser:
            related = db_field.related_model
            org_id = getattr(request.user, 'organization_id', None)
            if related is Organization:
                kwargs['queryset'] = Organization.objects.filter(id=org_id)
            elif hasattr(related, 'organization_id'):
                kwargs['queryset'] = related.objects.filter(organization_id=org_id)
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def save_model(self, request, obj, form, change):
        if not change and hasattr(obj, 'organization_id') and not obj.organization_id:
            obj.organization_id = request.user.organization_id
        if hasattr(obj, 'created_by_id') and not change:
            obj.created_by = request.user
        if hasattr(obj, 'updated_by_id'):
            obj.updated_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'timezone', 'currency', 'is_active', 'created_at']
    list_filter = ['is_active', 'currency']
    search_fields = ['name', 'email']
    readonly_fields = ['id', 'created_at', 'updated_at']
