from django.contrib import admin
from .models import User

admin.site.site_header = "Obuv Opt"
admin.site.site_title = "Obuv Opt"
admin.site.index_title = "Администрирование"


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "phone", "name", "role", "label", "is_active", "is_staff")
    list_filter = ("role", "is_active")
    search_fields = ("phone", "name", "email")
