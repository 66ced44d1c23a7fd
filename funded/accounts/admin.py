"""
accounts/admin.py
─────────────────
Admin registrations for CustomUser, SchoolClass and Student, plus the mixin
every class-owned model admin uses to keep a representative inside their
own class.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import CustomUser, SchoolClass, Student
from .utils import get_representative_class


class ClassScopedAdminMixin:
    """
    Superusers see every class.  A representative only sees rows of the class
    they manage, never picks the class on a form (it is filled in before validation),
    and only gets same-class rows offered in foreign key drop-downs.
    """

    scope_field = 'school_class'

    def get_scope(self, request):
        if request.user.is_superuser:
            return None
        return get_representative_class(request.user)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        school_class = self.get_scope(request)
        if school_class is None:
            return qs.none()
        return qs.filter(**{self.scope_field: school_class})

    def get_fields(self, request, obj=None):
        fields = list(super().get_fields(request, obj))
        if not request.user.is_superuser and self.scope_field in fields:
            fields.remove(self.scope_field)
        return fields

    def get_form(self, request, obj=None, **kwargs):
        form = super().get_form(request, obj, **kwargs)
        scope = None if request.user.is_superuser else self.get_scope(request)
        if scope is None:
            return form
        scope_field = self.scope_field

        class ScopedForm(form):
            # Filled in before validation so per-class constraints are checked.
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                if getattr(self.instance, f'{scope_field}_id') is None:
                    setattr(self.instance, scope_field, scope)

            def _get_validation_exclusions(self):
                return super()._get_validation_exclusions() - {scope_field}

        ScopedForm.__name__ = form.__name__
        return ScopedForm

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        related = db_field.related_model
        if not request.user.is_superuser and any(
            f.name == 'school_class' for f in related._meta.concrete_fields
        ):
            kwargs['queryset'] = related._default_manager.filter(
                school_class=self.get_scope(request),
            )
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def assign_scope(self, request, obj):
        if not request.user.is_superuser and getattr(obj, f'{self.scope_field}_id') is None:
            setattr(obj, self.scope_field, self.get_scope(request))

    def save_model(self, request, obj, form, change):
        self.assign_scope(request, obj)
        super().save_model(request, obj, form, change)

    def has_add_permission(self, request, *args):
        if not request.user.is_superuser and self.get_scope(request) is None:
            return False
        return super().has_add_permission(request, *args)


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    """
    Extends the default UserAdmin to surface the operator role.
    """

    list_display  = BaseUserAdmin.list_display + ('role',)
    list_filter   = BaseUserAdmin.list_filter  + ('role',)

    fieldsets = BaseUserAdmin.fieldsets + (
        ('FundEd Role', {'fields': ('role',)}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('FundEd Role', {'fields': ('role',)}),
    )


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    list_display  = ('name', 'representative', 'school_year', 'student_count', 'created_at')
    list_filter   = ('school_year',)
    search_fields = ('name', 'representative__username', 'representative__last_name')
    raw_id_fields = ('representative',)

    @admin.display(description='Students')
    def student_count(self, obj):
        return obj.students.count()


@admin.register(Student)
class StudentAdmin(ClassScopedAdminMixin, admin.ModelAdmin):
    list_display  = ('roll_no', 'name', 'email', 'class_label', 'school_class', 'is_active')
    list_filter   = ('is_active', 'class_label')
    search_fields = ('roll_no', 'name', 'email')
    ordering      = ('school_class', 'roll_no')
    fields        = ('school_class', 'roll_no', 'name', 'email', 'class_label', 'is_active')
