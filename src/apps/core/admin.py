from django.contrib import admin
from .models import Airport, Navdata, Rank, Subfleet, Pilot, Pirep, PirepFieldValue, Acars


@admin.register(Airport)
class AirportAdmin(admin.ModelAdmin):
    list_display = ['icao', 'iata', 'name', 'country', 'latitude', 'longitude']
    search_fields = ['icao', 'iata', 'name']


@admin.register(Navdata)
class NavdataAdmin(admin.ModelAdmin):
    list_display = ['ident', 'name', 'type', 'latitude', 'longitude', 'frequency']
    list_filter = ['type']
    search_fields = ['ident', 'name']


@admin.register(Subfleet)
class SubfleetAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'airline_code', 'aircraft_type']


@admin.register(Rank)
class RankAdmin(admin.ModelAdmin):
    list_display = ['name', 'hours', 'auto_approve_acars', 'auto_approve_manual', 'auto_promote']
    filter_horizontal = ['subfleets']


@admin.register(Pilot)
class PilotAdmin(admin.ModelAdmin):
    list_display = ['name', 'rank', 'flight_time', 'flights', 'current_airport']
    readonly_fields = ['flight_time', 'flights', 'current_airport', 'last_pirep']


class PirepFieldValueInline(admin.TabularInline):
    model = PirepFieldValue
    extra = 0


@admin.register(Pirep)
class PirepAdmin(admin.ModelAdmin):
    list_display = ['id', 'pilot', 'departure_airport', 'arrival_airport', 'flight_time', 'state', 'source']
    list_filter = ['state', 'source']
    readonly_fields = ['state']
    inlines = [PirepFieldValueInline]

    # Credited to the pilot once reviewed; reject() reverses the stored values
    reviewed_readonly_fields = ['pilot', 'flight_time', 'arrival_airport']

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        if obj is not None and obj.state != Pirep.State.PENDING:
            readonly += self.reviewed_readonly_fields
        return readonly


@admin.register(Acars)
class AcarsAdmin(admin.ModelAdmin):
    list_display = ['pirep', 'type', 'order', 'name', 'latitude', 'longitude']
    list_filter = ['type']
