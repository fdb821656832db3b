import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='FileRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('hash_id', models.CharField(db_index=True, help_text='SHA1 hex digest of the base filename', max_length=40)),
                ('file_name', models.CharField(help_text='Filename as submitted by the uploader', max_length=255)),
                ('extension', models.CharField(help_text='Final dot-separated segment of the filename', max_length=32)),
                ('uploaded_at', models.BigIntegerField(db_column='upload_time', db_index=True, help_text='Minutes since the Unix epoch')),
                ('owner', models.ForeignKey(db_column='user_upload', on_delete=django.db.models.deletion.CASCADE, related_name='uploaded_files', to=settings.AUTH_USER_MODEL)),
                ('target', models.ForeignKey(db_column='target_user', on_delete=django.db.models.deletion.CASCADE, related_name='received_files', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Shared file',
                'verbose_name_plural': 'Shared files',
                'db_table': 'files',
                'ordering': ['-uploaded_at'],
                'indexes': [models.Index(fields=['target', '-uploaded_at'], name='files_target_recent_idx')],
                'constraints': [models.UniqueConstraint(fields=('owner', 'hash_id'), name='files_owner_hash_unique')],
            },
        ),
    ]
