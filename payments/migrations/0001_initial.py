from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('transaction_id', models.TextField(primary_key=True, serialize=False)),
                ('phone', models.TextField()),
                ('amount', models.IntegerField()),
                ('status', models.TextField(choices=[('PENDING', 'Pending'), ('SUCCESS', 'Success'), ('FAILED', 'Failed')], default='PENDING')),
                ('mpesa_receipt', models.TextField(blank=True, null=True)),
            ],
            options={
                'db_table': 'transactions',
            },
        ),
    ]
