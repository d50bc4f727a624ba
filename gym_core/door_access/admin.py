from django.contrib import admin

from gym_core.door_access.models import AccessEvent


@admin.register(AccessEvent)
class AccessEventAdmin(admin.ModelAdmin):
    list_display = (
        "access_time",
        "user",
        "location_id",
        "location_name",
        "status",
        "session_id",
    )
    list_filter = ("status", "location_id")
    search_fields = ("location_id", "location_name", "user__username", "session_id")
    readonly_fields = [f.name for f in AccessEvent._meta.fields]
    ordering = ("-access_time",)

    # append-only log
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
