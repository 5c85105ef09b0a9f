import os

# Configuration
API_BASE_URL = os.getenv("LEARNCHECK_API_URL", "http://localhost:3001/api/v1")
REQUEST_TIMEOUT = 30

# Quiz
TIMER_DURATION_SECONDS = 5 * 60

# Preference sync (seconds)
DEBOUNCE_SECONDS = 0.1
POLLING_INTERVAL_SECONDS = 0.5
PREFERENCE_MESSAGE_TYPE = "preference-updated"

# Persisted progress
STORAGE_KEY_PREFIX = "learncheck"

RESULT_MESSAGES = {
    "PERFECT": {
        "title": "Luar Biasa! Pemahaman Sempurna!",
        "subtitle": "Kamu benar-benar menguasai materi ini. Terus pertahankan semangat belajarmu yang membara!",
    },
    "EXCELLENT": {
        "title": "Kerja Bagus! Kamu di Jalur yang Tepat!",
        "subtitle": "Pemahamanmu sudah sangat solid. Tinggal sedikit lagi polesan untuk jadi master!",
    },
    "GOOD": {
        "title": "Sudah Cukup Baik! Terus Asah Lagi!",
        "subtitle": "Dasar-dasarnya sudah kamu pegang. Coba pelajari lagi bagian yang masih ragu untuk pemahaman yang lebih dalam.",
    },
    "NEED_IMPROVEMENT": {
        "title": "Jangan Menyerah, Ini Baru Permulaan!",
        "subtitle": "Setiap ahli pernah menjadi pemula. Ini adalah kesempatan emas untuk meninjau kembali materi dan membangun fondasi yang lebih kuat.",
    },
}
