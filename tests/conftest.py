import copy
from typing import Any, Callable, Dict, List

import pytest
from fastapi.testclient import TestClient

from farm_platform_api.app.core import queries
from farm_platform_api.app.core.exceptions import StoreUnavailable
from farm_platform_api.app.core.security import create_access_token
from farm_platform_api.app.main import create_app
from farm_platform_api.app.services.notification_service import NotificationService


class _Tx:
    def __init__(self, graph: "InMemoryGraph") -> None:
        self.graph = graph

    def query(self, cypher: str, **params: Any) -> List[Dict[str, Any]]:
        return self.graph.run(cypher, params)


class InMemoryGraph:
    """Stand-in for ``GraphStore`` that executes the known queries on dicts.

    Each statement in ``core.queries`` maps to a handler reproducing its
    graph semantics.  Transactions are all-or-nothing: the state is
    restored if the unit of work raises.
    """

    def __init__(self) -> None:
        self.users: Dict[str, Dict[str, Any]] = {}
        self.farms: Dict[str, Dict[str, Any]] = {}
        self.owner_of: Dict[str, str] = {}
        self.sensors: List[Dict[str, Any]] = []
        self.readings: Dict[str, Dict[str, Any]] = {}
        self.interpretations: Dict[str, str] = {}
        self.profile_pics: Dict[str, Dict[str, Any]] = {}
        self.notifications: Dict[str, Dict[str, Any]] = {}
        self.fail = False
        self.executed: List[str] = []
        self._handlers: Dict[str, Callable[[Dict[str, Any]], List[Dict[str, Any]]]] = {
            queries.CREATE_FARM: self._create_farm,
            queries.LIST_FARMS: self._list_farms,
            queries.GET_FARM: self._get_farm,
            queries.UPDATE_FARM: self._update_farm,
            queries.DELETE_FARM: self._delete_farm,
            queries.GET_USER: self._get_user,
            queries.DELETE_PROFILE_PIC: self._delete_profile_pic,
            queries.CREATE_PROFILE_PIC: self._create_profile_pic,
            queries.GET_PROFILE_PIC: self._get_profile_pic,
            queries.LOCK_USER_STATS: self._lock_user_stats,
            queries.SAVE_USER_STATS: self._save_user_stats,
            queries.SAVE_NOTIFICATION: self._save_notification,
            queries.GET_UNREAD_NOTIFICATIONS: self._get_unread,
            queries.GET_ALL_NOTIFICATIONS: self._get_all,
            queries.GET_NOTIFICATION_BY_ID: self._get_notification,
            queries.MARK_NOTIFICATION_AS_READ: self._mark_read,
            queries.FIND_SENSOR_FARM: self._find_sensor_farm,
            queries.CREATE_SENSOR_FARM: self._create_sensor_farm,
            queries.SAVE_SENSOR_DATA: self._save_sensor_data,
            queries.GET_SENSOR_DATA_BY_FARM: self._get_sensor_data,
        }

    # GraphStore interface -------------------------------------------------

    def read(self, cypher: str, **params: Any) -> List[Dict[str, Any]]:
        return self.read_transaction(lambda tx: tx.query(cypher, **params))

    def write(self, cypher: str, **params: Any) -> List[Dict[str, Any]]:
        return self.write_transaction(lambda tx: tx.query(cypher, **params))

    def read_transaction(self, work):
        return work(_Tx(self))

    def write_transaction(self, work):
        snapshot = copy.deepcopy(self._state())
        try:
            return work(_Tx(self))
        except Exception:
            self._restore(snapshot)
            raise

    def verify_connectivity(self) -> bool:
        return not self.fail

    def close(self) -> None:
        pass

    def run(self, cypher: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        if self.fail:
            raise StoreUnavailable("Graph store error: connection refused")
        self.executed.append(cypher)
        return self._handlers[cypher](params)

    def _state(self) -> Dict[str, Any]:
        return {
            "users": self.users,
            "farms": self.farms,
            "owner_of": self.owner_of,
            "sensors": self.sensors,
            "readings": self.readings,
            "interpretations": self.interpretations,
            "profile_pics": self.profile_pics,
            "notifications": self.notifications,
        }

    def _restore(self, snapshot: Dict[str, Any]) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)

    # Helpers --------------------------------------------------------------

    def _merge_user(self, username: str) -> Dict[str, Any]:
        return self.users.setdefault(username, {"username": username})

    def _owned_farm(self, username: str, farm_id: str):
        if self.owner_of.get(farm_id) == username:
            return self.farms[farm_id]
        return None

    @staticmethod
    def _without_nulls(props: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in props.items() if v is not None}

    # Farms ----------------------------------------------------------------

    def _create_farm(self, p):
        self._merge_user(p["username"])
        props = self._without_nulls({
            "id": p["id"],
            "farmName": p["farmName"],
            "cropType": p["cropType"],
            "description": p["description"],
            "owner": p["username"],
            "createdAt": p["createdAt"],
            "updatedAt": p["updatedAt"],
            "lat": p["lat"],
            "lng": p["lng"],
            "image": p["image"],
        })
        self.farms[p["id"]] = props
        self.owner_of[p["id"]] = p["username"]
        return [{"id": p["id"]}]

    def _list_farms(self, p):
        owned = [f for fid, f in self.farms.items() if self.owner_of.get(fid) == p["username"]]
        owned.sort(key=lambda f: f.get("createdAt") or "", reverse=True)
        return [
            {
                "id": f.get("id"),
                "farmName": f.get("farmName"),
                "cropType": f.get("cropType"),
                "createdAt": f.get("createdAt"),
                "updatedAt": f.get("updatedAt"),
            }
            for f in owned
        ]

    def _get_farm(self, p):
        farm = self._owned_farm(p["username"], p["id"])
        return [{"f": dict(farm)}] if farm is not None else []

    def _update_farm(self, p):
        farm = self._owned_farm(p["username"], p["id"])
        if farm is None:
            return []
        for key in ("farmName", "cropType", "description", "updatedAt"):
            if p[key] is None:
                farm.pop(key, None)
            else:
                farm[key] = p[key]
        return [{"id": p["id"]}]

    def _delete_farm(self, p):
        if self._owned_farm(p["username"], p["id"]) is None:
            return []
        del self.farms[p["id"]]
        del self.owner_of[p["id"]]
        # DETACH DELETE only removes the farm; its sensors stay behind, unreachable.
        return [{"id": p["id"]}]

    # Profile --------------------------------------------------------------

    def _get_user(self, p):
        user = self.users.get(p["username"])
        return [{"u": dict(user)}] if user is not None else []

    def _delete_profile_pic(self, p):
        for pic_id in [k for k, v in self.profile_pics.items() if v["username"] == p["username"]]:
            del self.profile_pics[pic_id]
        return []

    def _create_profile_pic(self, p):
        self._merge_user(p["username"])
        self.profile_pics[p["id"]] = {
            "username": p["username"],
            "id": p["id"],
            "image": p["image"],
            "uploadedAt": p["uploadedAt"],
            "fileFormat": p["fileFormat"],
            "fileSize": p["fileSize"],
        }
        return [{"id": p["id"]}]

    def _get_profile_pic(self, p):
        return [
            {"image": pic["image"]}
            for pic in self.profile_pics.values()
            if pic["username"] == p["username"]
        ]

    def _lock_user_stats(self, p):
        user = self.users.get(p["username"])
        if user is None:
            return []
        user.setdefault("level", 1)
        user.setdefault("experience", 0)
        return [{"level": user["level"], "experience": user["experience"]}]

    def _save_user_stats(self, p):
        user = self.users.get(p["username"])
        if user is None:
            return []
        user["level"] = p["level"]
        user["experience"] = p["experience"]
        return [{"level": user["level"], "experience": user["experience"]}]

    # Notifications --------------------------------------------------------

    def _save_notification(self, p):
        self.notifications[p["id"]] = dict(p)
        return [{"n": dict(p)}]

    def _for_user(self, user_id, unread_only):
        found = [
            n for n in self.notifications.values()
            if n["userId"] == user_id and not (unread_only and n["read"])
        ]
        found.sort(key=lambda n: n["timestamp"], reverse=True)
        return [{"n": dict(n)} for n in found]

    def _get_unread(self, p):
        return self._for_user(p["userId"], unread_only=True)

    def _get_all(self, p):
        return self._for_user(p["userId"], unread_only=False)

    def _get_notification(self, p):
        n = self.notifications.get(p["notificationId"])
        return [{"n": dict(n)}] if n is not None else []

    def _mark_read(self, p):
        n = self.notifications.get(p["notificationId"])
        if n is None:
            return []
        n["read"] = True
        return [{"n": dict(n)}]

    # Soil analysis --------------------------------------------------------

    def _find_sensor_farm(self, p):
        username = self._merge_user(p["username"])["username"]
        named = sorted(
            (f for fid, f in self.farms.items()
             if self.owner_of.get(fid) == username and f.get("farmName") == p["farmName"]),
            key=lambda f: (f.get("createdAt") or "", f["id"]),
        )
        return [{"id": named[0]["id"] if named else None}]

    def _create_sensor_farm(self, p):
        if p["username"] not in self.users:
            return []
        self.farms[p["farmId"]] = {
            "id": p["farmId"],
            "farmName": p["farmName"],
            "owner": p["username"],
            "cropType": p["cropType"],
            "createdAt": p["submittedAt"],
            "updatedAt": p["submittedAt"],
        }
        self.owner_of[p["farmId"]] = p["username"]
        return [{"id": p["farmId"]}]

    def _save_sensor_data(self, p):
        farm = self._owned_farm(p["username"], p["farmId"])
        if farm is None:
            return []
        sensor = next(
            (s for s in self.sensors if s["farm_id"] == farm["id"] and s["sensorId"] == p["sensorId"]),
            None,
        )
        if sensor is None:
            sensor = {"sensorId": p["sensorId"], "farm_id": farm["id"], "readings": []}
            self.sensors.append(sensor)
        reading = {
            key: p[key]
            for key in (
                "id", "fertility", "moisture", "ph", "temperature", "sunlight",
                "humidity", "cropType", "username", "createdAt", "submittedAt",
            )
        }
        self.readings[p["id"]] = reading
        self.interpretations[p["id"]] = p["interpretation"]
        sensor["readings"].append(p["id"])
        return [{"id": p["id"]}]

    def _get_sensor_data(self, p):
        rows = []
        for fid, farm in self.farms.items():
            if self.owner_of.get(fid) != p["username"] or farm.get("farmName") != p["farmName"]:
                continue
            for sensor in self.sensors:
                if sensor["farm_id"] != fid:
                    continue
                for reading_id in sensor["readings"]:
                    rows.append({
                        "farmName": farm["farmName"],
                        "sensorId": sensor["sensorId"],
                        "reading": dict(self.readings[reading_id]),
                        "interpretation": self.interpretations.get(reading_id),
                    })
        rows.sort(key=lambda r: r["reading"]["createdAt"], reverse=True)
        return rows


def make_token(username: str, expires_delta=None) -> str:
    return create_access_token({"sub": username}, expires_delta=expires_delta)


@pytest.fixture
def graph():
    return InMemoryGraph()


@pytest.fixture
def alice_token():
    return make_token("alice")


@pytest.fixture
def bob_token():
    return make_token("bob")


@pytest.fixture
def notifications(graph):
    return NotificationService(graph)


@pytest.fixture
def client(graph):
    app = create_app(graph)
    return TestClient(app)


@pytest.fixture
def auth():
    def _headers(username: str = "alice"):
        return {"Authorization": f"Bearer {make_token(username)}"}

    return _headers
