from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("chat", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="chatroom",
            name="video_room_id",
            field=models.CharField(blank=True, db_index=True, default="", max_length=128),
        ),
    ]
