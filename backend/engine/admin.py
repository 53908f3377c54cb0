from django.contrib import admin
from .models import EntropyPool, CallerNonce

@admin.register(EntropyPool)
class EntropyPoolAdmin(admin.ModelAdmin):
    list_display = ("domain", "draws", "updated_at")
    # accumulator stays out of the list view
    readonly_fields = ("domain", "accumulator", "draws")

@admin.register(CallerNonce)
class CallerNonceAdmin(admin.ModelAdmin):
    list_display = ("domain", "caller", "value")
    list_filter = ("domain",)
