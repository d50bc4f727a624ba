# gym_core/door_access/management/commands/door_access_locations.py

from django.core.management.base import BaseCommand

from gym_core.door_access.geofence import reload_catalog


class Command(BaseCommand):
    help = "Validate and print the configured door geofences (settings.DOOR_ACCESS['LOCATIONS'])."

    def handle(self, *args, **options):
        # ImproperlyConfigured propagates and exits non-zero on a bad table
        catalog = reload_catalog()

        for loc in catalog:
            self.stdout.write(
                f"{loc.location_id:>4}  {loc.name or '-':<28} "
                f"({loc.center_latitude:.6f}, {loc.center_longitude:.6f})  "
                f"r={loc.radius_meters:g}m  {loc.display_address}"
            )

        self.stdout.write(self.style.SUCCESS(f"{len(catalog)} door location(s) configured."))
