"""
Parameterized Cypher statements used by the service layer.

Every statement that touches a Farm goes through
``(:User {username: $username})-[:OWNS]->(:Farm)`` so a user can only
see or modify their own farms.  Statements return named columns; nodes
returned whole (``RETURN f``) arrive in Python as property dicts.
"""

# ---------------------------------------------------------------------------
# Farms
# ---------------------------------------------------------------------------

CREATE_FARM = """
MERGE (u:User {username: $username})
CREATE (f:Farm {
    id: $id,
    farmName: $farmName,
    cropType: $cropType,
    description: $description,
    owner: $username,
    createdAt: $createdAt,
    updatedAt: $updatedAt,
    lat: $lat,
    lng: $lng,
    image: $image
})
CREATE (u)-[:OWNS]->(f)
RETURN f.id AS id
"""

LIST_FARMS = """
MATCH (u:User {username: $username})-[:OWNS]->(f:Farm)
RETURN f.id AS id, f.farmName AS farmName, f.cropType AS cropType,
       f.createdAt AS createdAt, f.updatedAt AS updatedAt
ORDER BY f.createdAt DESC
"""

GET_FARM = """
MATCH (u:User {username: $username})-[:OWNS]->(f:Farm {id: $id})
RETURN f
"""

# owner and id are deliberately absent from the SET list
UPDATE_FARM = """
MATCH (u:User {username: $username})-[:OWNS]->(f:Farm {id: $id})
SET f.farmName = $farmName,
    f.cropType = $cropType,
    f.description = $description,
    f.updatedAt = $updatedAt
RETURN f.id AS id
"""

DELETE_FARM = """
MATCH (u:User {username: $username})-[:OWNS]->(f:Farm {id: $id})
WITH f, f.id AS id
DETACH DELETE f
RETURN id
"""

# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

GET_USER = """
MATCH (u:User {username: $username})
RETURN u
"""

DELETE_PROFILE_PIC = """
MATCH (u:User {username: $username})-[:HAS_PROFILE_PIC]->(p:ProfilePic)
DETACH DELETE p
"""

CREATE_PROFILE_PIC = """
MERGE (u:User {username: $username})
CREATE (p:ProfilePic {
    id: $id,
    image: $image,
    uploadedAt: $uploadedAt,
    fileFormat: $fileFormat,
    fileSize: $fileSize
})
CREATE (u)-[:HAS_PROFILE_PIC]->(p)
RETURN p.id AS id
"""

GET_PROFILE_PIC = """
MATCH (u:User {username: $username})-[:HAS_PROFILE_PIC]->(p:ProfilePic)
RETURN p.image AS image
"""

# The SET takes a write lock on the user node, so a concurrent leveling
# transaction for the same user waits until this one commits.
LOCK_USER_STATS = """
MATCH (u:User {username: $username})
SET u.level = coalesce(u.level, 1),
    u.experience = coalesce(u.experience, 0)
RETURN u.level AS level, u.experience AS experience
"""

SAVE_USER_STATS = """
MATCH (u:User {username: $username})
SET u.level = $level,
    u.experience = $experience
RETURN u.level AS level, u.experience AS experience
"""

# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

SAVE_NOTIFICATION = """
CREATE (n:Notification {
    id: $id,
    userId: $userId,
    type: $type,
    title: $title,
    message: $message,
    read: $read,
    timestamp: $timestamp,
    metadata: $metadata
})
RETURN n
"""

GET_UNREAD_NOTIFICATIONS = """
MATCH (n:Notification {userId: $userId})
WHERE n.read = false
RETURN n
ORDER BY n.timestamp DESC
"""

GET_ALL_NOTIFICATIONS = """
MATCH (n:Notification {userId: $userId})
RETURN n
ORDER BY n.timestamp DESC
"""

GET_NOTIFICATION_BY_ID = """
MATCH (n:Notification {id: $notificationId})
RETURN n
"""

MARK_NOTIFICATION_AS_READ = """
MATCH (n:Notification {id: $notificationId})
SET n.read = true
RETURN n
"""

# ---------------------------------------------------------------------------
# Soil analysis
# ---------------------------------------------------------------------------

# farmName is not unique per owner: the oldest matching farm is used.
# The SET takes a write lock on the user node, so two first readings for
# a new farm name cannot both create the farm.
FIND_SENSOR_FARM = """
MERGE (u:User {username: $username})
SET u.username = u.username
WITH u
OPTIONAL MATCH (u)-[:OWNS]->(f:Farm {farmName: $farmName})
WITH f
ORDER BY f.createdAt, f.id
LIMIT 1
RETURN f.id AS id
"""

CREATE_SENSOR_FARM = """
MATCH (u:User {username: $username})
CREATE (u)-[:OWNS]->(f:Farm {
    id: $farmId,
    farmName: $farmName,
    owner: $username,
    cropType: $cropType,
    createdAt: $submittedAt,
    updatedAt: $submittedAt
})
RETURN f.id AS id
"""

SAVE_SENSOR_DATA = """
MATCH (u:User {username: $username})-[:OWNS]->(f:Farm {id: $farmId})
MERGE (f)-[:HAS_SENSOR]->(s:Sensor {sensorId: $sensorId})
CREATE (r:Reading {
    id: $id,
    fertility: $fertility,
    moisture: $moisture,
    ph: $ph,
    temperature: $temperature,
    sunlight: $sunlight,
    humidity: $humidity,
    cropType: $cropType,
    username: $username,
    createdAt: $createdAt,
    submittedAt: $submittedAt
})
CREATE (i:Interpretation {value: $interpretation})
CREATE (s)-[:HAS_READING]->(r)
CREATE (r)-[:INTERPRETED_AS]->(i)
RETURN r.id AS id
"""

GET_SENSOR_DATA_BY_FARM = """
MATCH (u:User {username: $username})-[:OWNS]->(f:Farm {farmName: $farmName})-[:HAS_SENSOR]->(s:Sensor)
MATCH (s)-[:HAS_READING]->(r:Reading)
OPTIONAL MATCH (r)-[:INTERPRETED_AS]->(i:Interpretation)
RETURN f.farmName AS farmName, s.sensorId AS sensorId, r AS reading,
       i.value AS interpretation
ORDER BY r.createdAt DESC
"""
