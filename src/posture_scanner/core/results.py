from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from dataclasses_json import dataclass_json

GLOBAL_REGION = "global"


class ResultStatus(IntEnum):
    OK = 0
    WARN = 1
    FAIL = 2
    UNKNOWN = 3


@dataclass_json
@dataclass
class ResultRecord:
    status: ResultStatus
    message: str
    region: str = GLOBAL_REGION
    resource: Optional[str] = None


@dataclass
class PluginOutput:
    results: List[ResultRecord] = field(default_factory=list)
    source: Dict[str, Any] = field(default_factory=dict)

    def __iter__(self):
        # allows ``results, source = plugin.run(...)``
        return iter((self.results, self.source))

    def count(self, status: ResultStatus) -> int:
        return len([r for r in self.results if r.status == status])


def add_result(
    results: List[ResultRecord],
    status: Union[ResultStatus, int],
    message: str,
    region: Optional[str] = None,
    resource: Optional[str] = None,
) -> ResultRecord:
    record = ResultRecord(
        status=ResultStatus(status),
        message=message,
        region=region or GLOBAL_REGION,
        resource=resource,
    )
    results.append(record)
    return record
