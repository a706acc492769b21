from django.contrib import admin
from .models import Aircraft, Multiplier, Pirep, PirepEvent, Rank, RankAircraft


class RankAircraftInline(admin.TabularInline):
    model = RankAircraft
    extra = 0


@admin.register(Pirep)
class PirepAdmin(admin.ModelAdmin):
    list_display = ['flight_number', 'departure_icao', 'arrival_icao', 'flight_time', 'status', 'pilot_id', 'date']
    list_filter = ['status']
    search_fields = ['flight_number', 'departure_icao', 'arrival_icao']

    # Read-only; PIREP mutations go through PirepService.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PirepEvent)
class PirepEventAdmin(admin.ModelAdmin):
    list_display = ['pirep', 'action', 'performed_by', 'created_at']
    list_filter = ['action']

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Rank)
class RankAdmin(admin.ModelAdmin):
    list_display = ['name', 'minimum_flight_time', 'maximum_flight_time', 'allow_all_aircraft']
    inlines = [RankAircraftInline]


@admin.register(Aircraft)
class AircraftAdmin(admin.ModelAdmin):
    list_display = ['name', 'livery']


@admin.register(Multiplier)
class MultiplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'value']
