import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import gradebook.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0001_initial'),
        ('core', '0001_initial'),
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AssessmentRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('as1', models.DecimalField(blank=True, decimal_places=2, max_digits=4, null=True, validators=[gradebook.models.validate_score], verbose_name='AS1')),
                ('as2', models.DecimalField(blank=True, decimal_places=2, max_digits=4, null=True, validators=[gradebook.models.validate_score], verbose_name='AS2')),
                ('as3', models.DecimalField(blank=True, decimal_places=2, max_digits=4, null=True, validators=[gradebook.models.validate_score], verbose_name='AS3')),
                ('at', models.DecimalField(blank=True, decimal_places=2, help_text='Term exam score', max_digits=4, null=True, validators=[gradebook.models.validate_score], verbose_name='AT')),
                ('systematic_average', models.DecimalField(blank=True, decimal_places=2, editable=False, max_digits=4, null=True, verbose_name='MAS')),
                ('term_average', models.DecimalField(blank=True, decimal_places=2, editable=False, max_digits=4, null=True, verbose_name='MT')),
                ('remarks', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assessment_records', to=settings.AUTH_USER_MODEL)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assessment_records', to='students.student')),
                ('subject', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assessment_records', to='academics.subject')),
                ('term', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assessment_records', to='core.term')),
            ],
            options={
                'verbose_name': 'Assessment Record',
                'verbose_name_plural': 'Assessment Records',
                'ordering': ['term', 'subject', 'student'],
                'unique_together': {('student', 'subject', 'term')},
                'indexes': [models.Index(fields=['subject', 'term'], name='record_subject_term_idx')],
            },
        ),
    ]
