import pytest


@pytest.fixture
def artist_records():
    return [
        {
            "artistName": "Miles Davis",
            "musicBrainzArtistID": "561d854a-6a28-4aa7-8c99-323e6ce46c2a",
            "status": "completed",
            "mvids": [
                {
                    "strTrack": "So What",
                    "strMusicVid": "https://www.youtube.com/watch?v=zqNTltOGh5c",
                    "intDuration": 562,
                },
                {
                    "strTrack": "Blue in Green",
                    "strMusicVid": "https://www.youtube.com/watch?v=PoPL7BExSQU",
                    "intDuration": 337,
                },
            ],
            "stats": {"views": 1200, "rating": 4.5},
        },
        {
            "artistName": "John Coltrane",
            "musicBrainzArtistID": "b625448e-bf4a-41c3-a421-72ad46cdb831",
            "status": "pending",
            "mvids": [],
            "error": None,
        },
    ]
