from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='StoredRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(help_text='Name of the persisted record.', max_length=64, unique=True)),
                ('value', models.JSONField(blank=True, default=dict, help_text='JSON payload of the record.')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the record was last written.')),
            ],
            options={
                'verbose_name': 'Stored record',
                'verbose_name_plural': 'Stored records',
                'ordering': ['key'],
            },
        ),
    ]
