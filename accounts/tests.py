from django.test import TestCase
from django.contrib.auth import get_user_model

User = get_user_model()


class UserManagerTests(TestCase):
    """Tests for the custom UserManager."""

    def test_create_user(self):
        """Test creating a regular user with email."""
        user = User.objects.create_user(
            email='test@example.com',
            password='testpass123'
        )
        self.assertEqual(user.email, 'test@example.com')
        self.assertTrue(user.check_password('testpass123'))
        self.assertFalse(user.is_staff)
        self.assertFalse(user.is_superuser)
        self.assertTrue(user.is_active)

    def test_create_user_without_email_raises_error(self):
        """Test that creating a user without email raises ValueError."""
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_create_user_normalizes_email(self):
        """Test that email is normalized (lowercase domain)."""
        user = User.objects.create_user(
            email='test@EXAMPLE.COM',
            password='testpass123'
        )
        self.assertEqual(user.email, 'test@example.com')

    def test_create_superuser(self):
        """Test creating a superuser."""
        user = User.objects.create_superuser(
            email='admin@example.com',
            password='adminpass123'
        )
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)

    def test_create_superuser_without_is_superuser_raises_error(self):
        """Test that superuser must have is_superuser=True."""
        with self.assertRaises(ValueError):
            User.objects.create_superuser(
                email='admin@example.com',
                password='adminpass123',
                is_superuser=False
            )

    def test_create_school_admin(self):
        user = User.objects.create_school_admin(email='director@school.ao', password='pass12345')
        self.assertTrue(user.is_school_admin)
        self.assertFalse(user.is_teacher)
        self.assertFalse(user.is_student)

    def test_create_secretary(self):
        user = User.objects.create_secretary(email='secretaria@school.ao', password='pass12345')
        self.assertTrue(user.is_secretary)
        self.assertFalse(user.is_treasurer)

    def test_create_treasurer(self):
        user = User.objects.create_treasurer(email='tesouraria@school.ao', password='pass12345')
        self.assertTrue(user.is_treasurer)
        self.assertFalse(user.is_secretary)


class UserRoleTests(TestCase):
    """Tests for role labels and role assignment."""

    def setUp(self):
        self.user = User.objects.create_user(email='staff@school.ao', password='pass12345')

    def test_user_str_returns_email(self):
        self.assertEqual(str(self.user), 'staff@school.ao')

    def test_role_label_plain_user(self):
        self.assertEqual(self.user.role_label, 'User')

    def test_role_label_superuser(self):
        admin = User.objects.create_superuser(email='root@school.ao', password='pass12345')
        self.assertEqual(admin.role_label, 'Super Admin')

    def test_assign_role_persists(self):
        self.user.assign_role('teacher')
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_teacher)
        self.assertTrue(self.user.has_role(User.Role.TEACHER))
        self.assertEqual(self.user.role_label, 'Teacher')

    def test_revoke_role(self):
        self.user.assign_role(User.Role.TREASURER)
        self.user.revoke_role(User.Role.TREASURER)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_treasurer)

    def test_roles_lists_every_flag(self):
        self.user.assign_role('teacher')
        self.user.assign_role('secretary')
        self.assertEqual(set(self.user.roles), {User.Role.TEACHER, User.Role.SECRETARY})

    def test_unknown_role_raises(self):
        with self.assertRaises(ValueError):
            self.user.assign_role('janitor')

    def test_username_field_is_email(self):
        self.assertEqual(User.USERNAME_FIELD, 'email')
