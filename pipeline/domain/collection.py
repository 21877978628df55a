USERS = "users"
VIDEOS = "videos"
SUBSCRIPTIONS = "subscriptions"
LIKES = "likes"
PLAYLISTS = "playlists"
