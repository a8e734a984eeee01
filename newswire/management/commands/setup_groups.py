"""
Management command to set up role groups and permissions.

This command creates the two role groups (Admin, User), assigns model
permissions to each and can seed an administrator account.

Usage:
    python manage.py setup_groups
    python manage.py setup_groups --admin-username admin \
        --admin-email admin@example.com --admin-password secret
"""

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group, Permission
from django.contrib.contenttypes.models import ContentType
from django.core.management.base import BaseCommand, CommandError

from newswire.models import Category, ContactMessage, News, TeamMember, UserFavorite


# Model permissions held by the User role, as (model, actions)
USER_ROLE_PERMISSIONS = [
    (News, ['add', 'view', 'change', 'delete']),
    (UserFavorite, ['add', 'view', 'delete']),
    (Category, ['view']),
    (TeamMember, ['view']),
    (ContactMessage, ['add']),
]

ADMIN_ROLE_MODELS = [News, UserFavorite, Category, TeamMember, ContactMessage]


class Command(BaseCommand):
    """
    Django management command to create and configure role groups.
    """

    help = (
        'Sets up role groups (Admin, User) with appropriate permissions '
        'and optionally creates an administrator account'
    )

    def add_arguments(self, parser):
        parser.add_argument('--admin-username', help='Username of the administrator to create')
        parser.add_argument('--admin-email', default='', help='E-mail of the administrator')
        parser.add_argument('--admin-password', help='Password of the administrator')

    def handle(self, *args, **options):
        """
        Main method that executes when the command is run.
        Creates groups, assigns permissions and seeds the administrator.
        """
        self.stdout.write(
            self.style.SUCCESS('Setting up role groups and permissions...')
        )

        if options['admin_username'] and not options['admin_password']:
            raise CommandError('--admin-password is required with --admin-username')

        try:
            admin_group = self._get_group(settings.NEWSWIRE_ADMIN_ROLE)
            user_group = self._get_group(settings.NEWSWIRE_USER_ROLE)

            # ===== ADMIN PERMISSIONS =====
            # Admins have every permission on the site's models
            self.stdout.write('\nSetting up Admin permissions...')
            admin_permissions = list(Permission.objects.filter(
                content_type__in=list(ContentType.objects.get_for_models(*ADMIN_ROLE_MODELS).values())
            ))
            self._assign(admin_group, admin_permissions)

            # ===== USER PERMISSIONS =====
            # Users write articles and keep favorites
            self.stdout.write('\nSetting up User permissions...')
            user_permissions = []
            for model, actions in USER_ROLE_PERMISSIONS:
                content_type = ContentType.objects.get_for_model(model)
                for action in actions:
                    user_permissions.append(Permission.objects.get(
                        codename=f'{action}_{model._meta.model_name}',
                        content_type=content_type,
                    ))
            self._assign(user_group, user_permissions)

            if options['admin_username']:
                self._seed_admin(
                    options['admin_username'],
                    options['admin_email'],
                    options['admin_password'],
                    admin_group,
                )

            self.stdout.write(self.style.SUCCESS(
                '\n✓ Successfully set up all groups and permissions!'
            ))

        except Exception as e:
            error_msg = f'Error setting up groups: {str(e)}'
            self.stdout.write(self.style.ERROR(error_msg))
            raise

    def _get_group(self, name):
        group, created = Group.objects.get_or_create(name=name)
        if created:
            self.stdout.write(self.style.SUCCESS(f'Created {name} group'))
        else:
            self.stdout.write(f'{name} group already exists')
        return group

    def _assign(self, group, permissions):
        group.permissions.set(permissions)
        msg = (
            f'  - Assigned {len(permissions)} permissions '
            f'to {group.name} group'
        )
        self.stdout.write(self.style.SUCCESS(msg))
        for perm in permissions:
            self.stdout.write(f'    • {perm.name}')

    def _seed_admin(self, username, email, password, admin_group):
        """Create the administrator account if missing and grant the Admin role."""
        User = get_user_model()
        user = User.objects.filter(username=username).first()
        if user is None:
            user = User.objects.create_superuser(username=username, email=email, password=password)
            self.stdout.write(self.style.SUCCESS(f'\nCreated administrator "{username}"'))
        else:
            self.stdout.write(f'\nAdministrator "{username}" already exists')
        user.groups.add(admin_group)
