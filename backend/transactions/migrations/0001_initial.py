from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_id', models.UUIDField(blank=True, db_index=True, null=True)),
                ('item_name', models.CharField(blank=True, max_length=255)),
                ('item_category', models.CharField(blank=True, max_length=200)),
                ('type', models.CharField(choices=[('in', 'Stock In'), ('out', 'Stock Out'), ('return', 'Return'), ('transfer', 'Transfer'), ('confirmation', 'Replacement Confirmation'), ('create_item', 'Item Created'), ('update_item', 'Item Updated'), ('delete_item', 'Item Deleted'), ('create_category', 'Category Created'), ('delete_category', 'Category Deleted'), ('create_user', 'User Created'), ('delete_user', 'User Deleted'), ('system_change', 'System Change')], max_length=20)),
                ('quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('branch', models.CharField(blank=True, db_index=True, max_length=200)),
                ('asset_number', models.CharField(blank=True, max_length=200)),
                ('replaced_asset_number', models.CharField(blank=True, max_length=200)),
                ('model', models.CharField(blank=True, max_length=200)),
                ('serial_number', models.TextField(blank=True)),
                ('replaced_serial_number', models.CharField(blank=True, max_length=200)),
                ('item_tracking_id', models.CharField(blank=True, db_index=True, max_length=100)),
                ('reason', models.TextField(blank=True)),
                ('reason_kind', models.CharField(blank=True, choices=[('new_equipment', 'New Equipment'), ('replacement_equipment', 'Replacement Equipment'), ('repaired', 'Repaired'), ('confirmation', 'Confirmed replacement')], max_length=30)),
                ('reason_note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('performed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'transactions',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='PendingReplacement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_id', models.UUIDField(db_index=True)),
                ('item_name', models.CharField(max_length=255)),
                ('branch', models.CharField(max_length=200)),
                ('item_tracking_id', models.CharField(max_length=100)),
                ('reason', models.TextField()),
                ('reason_note', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Completed', 'Completed')], default='Pending', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('transaction', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pending_replacements', to='transactions.transaction')),
            ],
            options={
                'db_table': 'pending_replacements',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.AddIndex(
            model_name='transaction',
            index=models.Index(fields=['type', 'created_at'], name='idx_txn_type_created'),
        ),
        migrations.AddIndex(
            model_name='transaction',
            index=models.Index(fields=['item_id', 'type', 'item_tracking_id'], name='idx_txn_item_type_tracking'),
        ),
    ]
