from django.contrib import admin
from .models import CheckInDocument, DevotionDocument

@admin.register(DevotionDocument)
class DevotionDocumentAdmin(admin.ModelAdmin):
    list_display = ("record_id", "owner_uid", "date", "updated_at")
    list_filter = ("owner_uid",)
    search_fields = ("record_id", "observation", "application", "prayer_text")

@admin.register(CheckInDocument)
class CheckInDocumentAdmin(admin.ModelAdmin):
    list_display = ("record_id", "owner_uid", "date", "mood", "updated_at")
    list_filter = ("owner_uid", "mood")
    search_fields = ("record_id", "note")
