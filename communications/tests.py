from smtplib import SMTPException
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse

from communications import services
from communications.models import EmailMessage, Notification
from communications.tasks import send_email_task

User = get_user_model()


class NotificationServiceTest(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(email='user@school.com', password='testpass123')
        self.other = User.objects.create_user(email='other@school.com', password='testpass123')

    def test_notify(self):
        notification = services.notify(self.user, 'Hello', 'World', kind=Notification.Kind.GRADE, link='/x/')
        self.assertEqual(notification.recipient, self.user)
        self.assertFalse(notification.is_read)
        self.assertEqual(services.unread_count(self.user), 1)

    def test_notify_without_user(self):
        self.assertIsNone(services.notify(None, 'Hello', 'World'))
        self.assertFalse(Notification.objects.exists())

    def test_latest_is_limited_and_newest_first(self):
        for n in range(25):
            services.notify(self.user, f'N{n}', 'msg')
        latest = services.latest(self.user)
        self.assertEqual(len(latest), 20)
        self.assertEqual(latest[0].title, 'N24')

    @override_settings(GRADEBOOK_NOTIFICATION_FEED_LIMIT=5)
    def test_latest_limit_from_settings(self):
        for n in range(8):
            services.notify(self.user, f'N{n}', 'msg')
        self.assertEqual(len(services.latest(self.user)), 5)

    def test_feed_after_id(self):
        first = services.notify(self.user, 'first', 'msg')
        second = services.notify(self.user, 'second', 'msg')
        services.notify(self.other, 'not mine', 'msg')
        self.assertEqual(services.feed(self.user, after=first.pk), [second])

    @override_settings(GRADEBOOK_NOTIFICATION_FEED_LIMIT=3)
    def test_feed_is_capped_and_pages_forward(self):
        created = [services.notify(self.user, f'N{n}', 'msg') for n in range(5)]

        first_page = services.feed(self.user)
        self.assertEqual(first_page, created[:3])

        second_page = services.feed(self.user, after=first_page[-1].pk)
        self.assertEqual(second_page, created[3:])

    def test_mark_read_only_own_rows(self):
        mine = services.notify(self.user, 'mine', 'msg')
        theirs = services.notify(self.other, 'theirs', 'msg')
        self.assertEqual(services.mark_read(self.user, [mine.pk, theirs.pk]), 1)
        theirs.refresh_from_db()
        self.assertFalse(theirs.is_read)

    def test_mark_all_read(self):
        services.notify(self.user, 'a', 'msg')
        services.notify(self.user, 'b', 'msg')
        self.assertEqual(services.mark_all_read(self.user), 2)
        self.assertEqual(services.unread_count(self.user), 0)


class SendEmailTest(TestCase):

    def test_send_email_delivers_and_logs(self):
        result = services.send_email('guardian@example.com', 'Subject', 'Body')
        self.assertTrue(result['success'])
        self.assertEqual(len(mail.outbox), 1)
        email = EmailMessage.objects.get(pk=result['message_id'])
        self.assertEqual(email.status, EmailMessage.Status.SENT)
        self.assertIsNotNone(email.sent_at)

    def test_invalid_address(self):
        result = services.send_email('not-an-address', 'Subject', 'Body')
        self.assertFalse(result['success'])
        self.assertFalse(EmailMessage.objects.exists())

    def test_task_marks_failed_after_retries(self):
        email = EmailMessage.objects.create(recipient_email='guardian@example.com', subject='S', message='M')
        with mock.patch('communications.tasks.send_mail', side_effect=SMTPException('down')):
            result = send_email_task.apply(args=[email.pk], retries=send_email_task.max_retries).get()
        self.assertEqual(result['status'], 'failed')
        email.refresh_from_db()
        self.assertEqual(email.status, EmailMessage.Status.FAILED)

    def test_task_marks_failed_on_non_retryable_error(self):
        email = EmailMessage.objects.create(recipient_email='guardian@example.com', subject='S', message='M')
        with mock.patch('communications.tasks.send_mail', side_effect=ValueError('bad header')):
            result = send_email_task.apply(args=[email.pk]).get()
        self.assertEqual(result, {'status': 'failed', 'error': 'bad header'})
        email.refresh_from_db()
        self.assertEqual(email.status, EmailMessage.Status.FAILED)
        self.assertEqual(email.error_message, 'bad header')

    def test_task_missing_message(self):
        self.assertEqual(send_email_task.apply(args=[999]).get(), {'status': 'missing'})


class NotificationViewsTest(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(email='user@school.com', password='testpass123')
        self.client.login(email='user@school.com', password='testpass123')

    def test_list(self):
        services.notify(self.user, 'a', 'msg')
        response = self.client.get(reverse('communications:notification_list'))
        data = response.json()
        self.assertEqual(data['unread_count'], 1)
        self.assertEqual(data['notifications'][0]['title'], 'a')

    def test_feed(self):
        first = services.notify(self.user, 'a', 'msg')
        second = services.notify(self.user, 'b', 'msg')
        response = self.client.get(reverse('communications:notification_feed'), {'after': first.pk})
        data = response.json()
        self.assertEqual([n['id'] for n in data['notifications']], [second.pk])
        self.assertEqual(data['last_id'], second.pk)

    @override_settings(GRADEBOOK_NOTIFICATION_FEED_LIMIT=2)
    def test_feed_from_start_is_capped(self):
        created = [services.notify(self.user, f'N{n}', 'msg') for n in range(4)]
        data = self.client.get(reverse('communications:notification_feed')).json()
        self.assertEqual([n['id'] for n in data['notifications']], [created[0].pk, created[1].pk])
        self.assertEqual(data['last_id'], created[1].pk)

    def test_feed_bad_after(self):
        response = self.client.get(reverse('communications:notification_feed'), {'after': 'x'})
        self.assertEqual(response.status_code, 400)

    def test_mark_read(self):
        notification = services.notify(self.user, 'a', 'msg')
        response = self.client.post(reverse('communications:mark_read', args=[notification.pk]))
        self.assertEqual(response.json(), {'updated': 1, 'unread_count': 0})

    def test_mark_all_read(self):
        services.notify(self.user, 'a', 'msg')
        services.notify(self.user, 'b', 'msg')
        response = self.client.post(reverse('communications:mark_all_read'))
        self.assertEqual(response.json()['updated'], 2)

    def test_login_required(self):
        self.client.logout()
        response = self.client.get(reverse('communications:notification_list'))
        self.assertEqual(response.status_code, 302)
